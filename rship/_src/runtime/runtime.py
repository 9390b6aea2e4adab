from abc import ABC, abstractmethod
from typing import Optional, Sequence

from rship._src.models.package import InstalledPackage


class RRuntime(ABC):
    """Interface to the R installation whose library is inventoried or rebuilt.

    Everything that touches the host R (metadata queries, the installed
    package set, the delegate installers) goes through this interface so the
    inventory and reconciliation logic can run against an in-memory fake.
    Installers raise `RCommandFailed` when R reports a failure.
    """

    @abstractmethod
    def version(self) -> str:
        """Return the R version, eg. '4.3.1'"""
        ...

    @abstractmethod
    def library_paths(self) -> list[str]:
        """Return the active library search paths (`.libPaths()`)"""
        ...

    @abstractmethod
    def installed_packages(self, library_paths: Sequence[str]) -> list[InstalledPackage]:
        """Return every package installed in `library_paths` with its metadata.

        Packages are returned in search order, so a package installed in
        more than one library appears once per library.
        """
        ...

    @abstractmethod
    def installed_names(self, library_paths: Optional[Sequence[str]] = None) -> set[str]:
        """Return the names of the installed packages.

        Parameters
        ----------
        library_paths: Sequence[str] | None
            Libraries to look in, defaults to the active search paths
        """
        ...

    @abstractmethod
    def install_from_cran(self, names: Sequence[str], lib: Optional[str] = None) -> None:
        ...

    @abstractmethod
    def ensure_package(self, name: str, lib: Optional[str] = None) -> None:
        """Install `name` from CRAN unless it can already be loaded"""
        ...

    @abstractmethod
    def install_from_bioconductor(
        self, names: Sequence[str], lib: Optional[str] = None, manager: str = "BiocManager"
    ) -> None:
        """Install `names` with the Bioconductor manager, never updating
        already installed dependencies.
        """
        ...

    @abstractmethod
    def install_from_github(
        self, repo: str, lib: Optional[str] = None, helper: str = "devtools"
    ) -> None:
        """Install a single `owner/repo` package, never upgrading its
        dependencies.
        """
        ...
