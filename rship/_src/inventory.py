import logging
from pathlib import Path
from typing import Optional, Sequence

from rship._src.constants import BASE_PRIORITY, BIOCONDUCTOR, DEFAULT_FILE_PREFIX
from rship._src.exceptions import ConfigurationError
from rship._src.models.inventory import Inventory
from rship._src.models.package import (
    InstalledPackage,
    PackageRecord,
    Registry,
    SourceControl,
    Unknown,
)
from rship._src.record import record_filename, write_record
from rship._src.runtime import RRuntime
from rship._src.utils import ensure_dir, major_minor, today


logger = logging.getLogger(__name__)


def classify(pkg: InstalledPackage):
    """Work out where an installed package came from.

    The first signal found wins: the DESCRIPTION `Repository` field, then
    the GitHub fields remotes/devtools record, then any mention of
    Bioconductor in the DESCRIPTION text.
    """
    if pkg.repository:
        return Registry(name=pkg.repository)
    if pkg.github_username and pkg.github_repo:
        return SourceControl(owner=pkg.github_username, repo=pkg.github_repo)
    if "bioconductor" in pkg.description.lower():
        return Registry(name=BIOCONDUCTOR)
    return Unknown()


def check_library_version(library_paths: Sequence[str], r_version: str) -> None:
    """Raise a ConfigurationError unless one of `library_paths` belongs to
    `r_version`.

    Only the major.minor part is compared: library paths like
    `~/R/x86_64-pc-linux-gnu-library/4.3` never carry the patch level.
    """
    try:
        prefix = major_minor(r_version)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    if not any(prefix in str(path) for path in library_paths):
        raise ConfigurationError(
            f"library path {', '.join(map(str, library_paths))} does not belong "
            f"to R {prefix}"
        )


def build_inventory(
    runtime: RRuntime,
    library_path: Optional[str] = None,
    r_version: Optional[str] = None,
) -> Inventory:
    """Inventory the third-party packages installed in an R library.

    Parameters
    ----------
    runtime: RRuntime
        The R installation to query
    library_path: str | None
        Library to inventory, defaults to the runtime's search paths
    r_version: str | None
        R version the library is expected to belong to. Defaults to the
        runtime's own version, which is not checked against the path.
    """
    if library_path is None:
        library_paths = runtime.library_paths()
    else:
        library_paths = [library_path]

    if r_version is not None:
        check_library_version(library_paths, r_version)
    else:
        r_version = runtime.version()

    packages = []
    seen = set()
    for installed in runtime.installed_packages(library_paths):
        if installed.priority == BASE_PRIORITY:
            continue
        # R loads the first copy found along the search path
        if installed.name in seen:
            logger.debug("skipping shadowed copy of %s", installed.name)
            continue
        seen.add(installed.name)
        packages.append(
            PackageRecord(
                name=installed.name,
                version=installed.version,
                source=classify(installed),
                columns=installed.columns,
            )
        )

    logger.info("inventoried %d packages in %s", len(packages), ", ".join(library_paths))
    return Inventory(packages=packages, r_version=r_version, created=today())


def save_inventory(
    inventory: Inventory,
    output_dir: str | Path = ".",
    prefix: str = DEFAULT_FILE_PREFIX,
) -> Path:
    """Write `inventory` to a dated record file in `output_dir`"""
    ensure_dir(output_dir)
    path = Path(output_dir) / record_filename(
        prefix, inventory.r_version or "unknown", inventory.created or today()
    )
    write_record(inventory, path)
    logger.info("wrote %d packages to %s", len(inventory), path)
    return path
