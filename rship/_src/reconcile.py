import logging
from pathlib import Path
from typing import Iterable, Optional

from rship._src.constants import (
    DEFAULT_BIOC_MANAGER,
    DEFAULT_GITHUB_HELPER,
    RepositoryKind,
)
from rship._src.exceptions import ConfigurationError, RCommandFailed
from rship._src.models.inventory import (
    InstallPlan,
    Inventory,
    ReconciliationResult,
)
from rship._src.models.package import repository_kind
from rship._src.record import read_record
from rship._src.runtime import RRuntime


logger = logging.getLogger(__name__)


def parse_repository_kinds(kinds: Optional[Iterable] = None) -> list[RepositoryKind]:
    """Match repository kind names case-insensitively.

    Unknown names are dropped with a warning. The result is always in
    install order (CRAN, Bioconductor, GitHub); `None` selects every kind.
    """
    if kinds is None:
        return list(RepositoryKind)

    by_name = {kind.value.lower(): kind for kind in RepositoryKind}
    selected = set()
    for kind in kinds:
        if isinstance(kind, RepositoryKind):
            selected.add(kind)
            continue
        match = by_name.get(str(kind).strip().lower())
        if match is None:
            logger.warning(
                "ignoring unsupported repository '%s', expected one of %s",
                kind, ", ".join(k.value for k in RepositoryKind),
            )
            continue
        selected.add(match)
    return [kind for kind in RepositoryKind if kind in selected]


def plan(
    inventory: Inventory,
    installed: Iterable[str],
    kinds: Optional[Iterable] = None,
    omit: Optional[Iterable[str]] = None,
) -> InstallPlan:
    """Partition the packages of `inventory` missing from `installed` into
    per-repository install batches.
    """
    installed = set(installed)
    omit = set(omit or [])
    selected = parse_repository_kinds(kinds)

    missing = [pkg for pkg in inventory if pkg.name not in installed]
    candidates = [pkg for pkg in missing if pkg.name not in omit]
    omitted = [pkg for pkg in missing if pkg.name in omit]

    batches = {kind: [] for kind in selected}
    unassigned = []
    for pkg in candidates:
        kind = repository_kind(pkg.source)
        if kind in batches:
            batches[kind].append(pkg)
        else:
            unassigned.append(pkg)

    return InstallPlan(
        candidates=candidates,
        omitted=omitted,
        batches=batches,
        unassigned=unassigned,
    )


class Reconciler():
    def __init__(
        self,
        runtime: RRuntime,
        lib: Optional[str] = None,
        bioc_manager: str = DEFAULT_BIOC_MANAGER,
        github_helper: str = DEFAULT_GITHUB_HELPER,
    ):
        """Reconciler replays an inventory against the library of `runtime`.

        Parameters
        ----------
        runtime: RRuntime
            The R installation to install into
        lib: str | None
            Library to install into and compare against, defaults to the
            runtime's search paths (installing into the first one)
        bioc_manager: str
            R package used to install Bioconductor packages
        github_helper: str
            R package providing `install_github`
        """
        self.runtime = runtime
        self.lib = lib
        self.bioc_manager = bioc_manager
        self.github_helper = github_helper

    def _installed(self) -> set[str]:
        return self.runtime.installed_names([self.lib] if self.lib else None)

    def reconcile(
        self,
        inventory: Optional[Inventory] = None,
        record_path: Optional[str | Path] = None,
        kinds: Optional[Iterable] = None,
        omit: Optional[Iterable[str]] = None,
    ) -> ReconciliationResult:
        """Install every package of the inventory the library is missing.

        Exactly one of `inventory` and `record_path` must be given. Failed
        installs do not raise; they show up in `still_missing`.
        """
        if (inventory is None) == (record_path is None):
            raise ConfigurationError(
                "supply exactly one of an inventory or a package record path"
            )
        if inventory is None:
            inventory = read_record(record_path)

        before = self._installed()
        install_plan = plan(inventory, before, kinds=kinds, omit=omit)

        attempts = {}
        for kind, batch in install_plan.batches.items():
            if not batch:
                logger.info("no %s packages to install", kind.value)
                continue
            logger.info("installing %d %s packages", len(batch), kind.value)
            attempts[kind] = [pkg.name for pkg in batch]
            if kind == RepositoryKind.CRAN:
                self._install_cran(batch)
            elif kind == RepositoryKind.BIOCONDUCTOR:
                self._install_bioconductor(batch)
            elif kind == RepositoryKind.GITHUB:
                self._install_github(batch)

        for pkg in install_plan.unassigned:
            logger.info("no selected repository can install %s (%s)", pkg.name, pkg.location)

        after = self._installed()
        candidates = {pkg.name for pkg in install_plan.candidates}
        newly_installed = after - before
        still_missing = candidates - newly_installed

        result = ReconciliationResult(
            already_satisfied=set(inventory.names) & before,
            newly_installed=newly_installed,
            still_missing=still_missing,
            candidates=candidates,
            omitted={pkg.name for pkg in install_plan.omitted},
            remaining=inventory.select(still_missing),
            attempts=attempts,
        )
        if result.notice is not None:
            logger.warning(result.notice.message)
        return result

    def _install_cran(self, batch):
        try:
            self.runtime.install_from_cran([pkg.name for pkg in batch], lib=self.lib)
        except RCommandFailed as e:
            logger.warning("CRAN install failed: %s", e)

    def _install_bioconductor(self, batch):
        try:
            self.runtime.ensure_package(self.bioc_manager, lib=self.lib)
            self.runtime.install_from_bioconductor(
                [pkg.name for pkg in batch], lib=self.lib, manager=self.bioc_manager
            )
        except RCommandFailed as e:
            logger.warning("Bioconductor install failed: %s", e)

    def _install_github(self, batch):
        try:
            self.runtime.ensure_package(self.github_helper, lib=self.lib)
        except RCommandFailed as e:
            logger.warning("could not install %s, skipping GitHub packages: %s", self.github_helper, e)
            return

        for pkg in batch:
            try:
                self.runtime.install_from_github(
                    pkg.source.slug, lib=self.lib, helper=self.github_helper
                )
            except RCommandFailed as e:
                logger.warning("GitHub install of %s failed: %s", pkg.source.slug, e)


def reconcile(
    runtime: RRuntime,
    inventory: Optional[Inventory] = None,
    record_path: Optional[str | Path] = None,
    kinds: Optional[Iterable] = None,
    omit: Optional[Iterable[str]] = None,
    lib: Optional[str] = None,
) -> ReconciliationResult:
    return Reconciler(runtime, lib=lib).reconcile(
        inventory=inventory, record_path=record_path, kinds=kinds, omit=omit
    )
