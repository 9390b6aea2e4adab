from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field, model_validator

from rship._src.constants import (
    LOCATION_COLUMN,
    NAME_COLUMN,
    VERSION_COLUMN,
    RepositoryKind,
)
from rship._src.models.package import PackageRecord


class Inventory(BaseModel):
    """The third-party packages of an R library at a point in time

    An inventory is built once from a live library (or loaded from a
    record) and never mutated afterwards.
    """
    packages: List[PackageRecord]
    r_version: Optional[str] = None
    created: Optional[str] = None

    @model_validator(mode="after")
    def _check_unique_names(self):
        seen = set()
        for pkg in self.packages:
            if pkg.name in seen:
                raise ValueError(f"duplicate package '{pkg.name}' in inventory")
            seen.add(pkg.name)
        return self

    @property
    def names(self) -> List[str]:
        return [pkg.name for pkg in self.packages]

    def get(self, name: str) -> Optional[PackageRecord]:
        for pkg in self.packages:
            if pkg.name == name:
                return pkg
        return None

    def select(self, names) -> List[PackageRecord]:
        """Records whose name is in `names`, in inventory order."""
        names = set(names)
        return [pkg for pkg in self.packages if pkg.name in names]

    def __len__(self):
        return len(self.packages)

    def __iter__(self):
        return iter(self.packages)


class InstallPlan(BaseModel):
    """What an install run would attempt against a given library"""
    candidates: List[PackageRecord]
    omitted: List[PackageRecord]
    batches: Dict[RepositoryKind, List[PackageRecord]]
    # candidates no selected repository kind can install
    unassigned: List[PackageRecord]


class PartialCompletionNotice(BaseModel):
    installed: int
    attempted: int
    remaining: List[Dict[str, str]]

    @property
    def message(self) -> str:
        return (
            f"Installed {self.installed}/{self.attempted} packages. "
            f"{len(self.remaining)} packages are still uninstalled.\n"
            "It is possible that they are not on CRAN/Bioconductor/GitHub.\n"
            "If required, these packages should be installed manually."
        )


class ReconciliationResult(BaseModel):
    """Outcome of replaying an inventory against a library"""
    already_satisfied: Set[str]
    newly_installed: Set[str]
    still_missing: Set[str]
    candidates: Set[str]
    omitted: Set[str] = Field(default_factory=set)
    remaining: List[PackageRecord] = Field(default_factory=list)
    attempts: Dict[RepositoryKind, List[str]] = Field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.still_missing

    @property
    def installed_count(self) -> int:
        return len(self.candidates - self.still_missing)

    @property
    def notice(self) -> Optional[PartialCompletionNotice]:
        if self.complete:
            return None
        return PartialCompletionNotice(
            installed=self.installed_count,
            attempted=len(self.candidates),
            remaining=[
                {
                    NAME_COLUMN: pkg.name,
                    VERSION_COLUMN: pkg.version,
                    LOCATION_COLUMN: pkg.location,
                }
                for pkg in self.remaining
            ],
        )
