import csv
import io
import logging
import shlex
import subprocess
from typing import Optional, Sequence

from rship._src.constants import (
    DEFAULT_BIOC_MANAGER,
    DEFAULT_CRAN_MIRROR,
    DEFAULT_GITHUB_HELPER,
    DEFAULT_RSCRIPT,
    DESCRIPTIVE_COLUMNS,
)
from rship._src.exceptions import ConfigurationError, RCommandFailed
from rship._src.models.package import InstalledPackage
from rship._src.runtime.runtime import RRuntime


logger = logging.getLogger(__name__)


# Arguments always reach R through commandArgs(), never through the
# expression source.
VERSION_EXPR = 'cat(R.version$major, ".", R.version$minor, sep = "")'

LIBPATHS_EXPR = "writeLines(.libPaths())"

_LIB_ARGS = """
lib <- commandArgs(trailingOnly = TRUE)
if (length(lib) == 0) lib <- .libPaths()
"""

INSTALLED_NAMES_EXPR = _LIB_ARGS + """
writeLines(unique(rownames(installed.packages(lib.loc = lib))))
"""

INSTALLED_PACKAGES_EXPR = _LIB_ARGS + """
pkgs <- as.data.frame(installed.packages(lib.loc = lib), stringsAsFactors = FALSE)
descs <- lapply(seq_len(nrow(pkgs)), function(i) {
  packageDescription(pkgs$Package[[i]], lib.loc = pkgs$LibPath[[i]])
})
field <- function(desc, name) {
  if (!inherits(desc, "packageDescription") || is.null(desc[[name]])) {
    return(NA_character_)
  }
  as.character(desc[[name]])
}
text <- function(desc) {
  if (!inherits(desc, "packageDescription")) return(NA_character_)
  paste(as.character(unlist(desc)), collapse = "\\n")
}
pkgs$Repository <- vapply(descs, field, character(1), name = "Repository")
pkgs$GithubUsername <- vapply(descs, field, character(1), name = "GithubUsername")
pkgs$GithubRepo <- vapply(descs, field, character(1), name = "GithubRepo")
pkgs$DescriptionText <- vapply(descs, text, character(1))
write.csv(pkgs, stdout(), row.names = FALSE, na = "")
"""

# trailing args: lib, repos, ...
_INSTALL_ARGS = """
args <- commandArgs(trailingOnly = TRUE)
lib <- args[[1]]
if (nzchar(lib)) .libPaths(c(lib, .libPaths())) else lib <- .libPaths()[[1]]
repos <- args[[2]]
"""

CRAN_INSTALL_EXPR = _INSTALL_ARGS + """
install.packages(args[-(1:2)], lib = lib, repos = repos)
"""

ENSURE_EXPR = _INSTALL_ARGS + """
if (!requireNamespace(args[[3]], quietly = TRUE)) {
  install.packages(args[[3]], lib = lib, repos = repos)
}
"""

BIOC_INSTALL_EXPR = _INSTALL_ARGS + """
install <- getExportedValue(args[[3]], "install")
install(args[-(1:3)], lib = lib, update = FALSE, ask = FALSE)
"""

GITHUB_INSTALL_EXPR = _INSTALL_ARGS + """
install_github <- getExportedValue(args[[3]], "install_github")
install_github(args[[4]], lib = lib, upgrade = FALSE)
"""


def _none_if_empty(value: Optional[str]) -> Optional[str]:
    if value is None or value.strip() == "":
        return None
    return value


class RscriptRuntime(RRuntime):
    def __init__(self, rscript: str = DEFAULT_RSCRIPT, cran_mirror: str = DEFAULT_CRAN_MIRROR):
        """RscriptRuntime runs every query and install through the
        `Rscript` front end of the host R installation.

        Parameters
        ----------
        rscript: str
            Name or path of the Rscript executable
        cran_mirror: str
            CRAN repository url handed to `install.packages`
        """
        self.rscript = rscript
        self.cran_mirror = cran_mirror

    def _run(self, expr: str, args: Sequence[str] = (), check: bool = True) -> subprocess.CompletedProcess:
        command = [self.rscript, "--vanilla", "-e", expr, *args]
        logger.info(
            "CMD %s -e '%s' %s",
            self.rscript,
            expr.strip().splitlines()[-1],
            " ".join(shlex.quote(a) for a in args),
        )

        try:
            proc = subprocess.run(
                command,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise ConfigurationError(
                f"could not run '{self.rscript}', is R installed and on the PATH?"
            ) from e

        if proc.stdout:
            logger.debug("STDOUT %s", proc.stdout.strip())
        if proc.stderr:
            logger.debug("STDERR %s", proc.stderr.strip())

        if check and proc.returncode != 0:
            raise RCommandFailed([self.rscript, "-e", "<expr>", *args], proc.returncode, proc.stderr.strip())
        return proc

    def version(self) -> str:
        return self._run(VERSION_EXPR).stdout.strip()

    def library_paths(self) -> list[str]:
        return [line for line in self._run(LIBPATHS_EXPR).stdout.splitlines() if line.strip()]

    def installed_packages(self, library_paths: Sequence[str]) -> list[InstalledPackage]:
        proc = self._run(INSTALLED_PACKAGES_EXPR, list(library_paths))
        packages = []
        for row in csv.DictReader(io.StringIO(proc.stdout)):
            packages.append(
                InstalledPackage(
                    name=row["Package"],
                    version=row["Version"],
                    priority=_none_if_empty(row.get("Priority")),
                    repository=_none_if_empty(row.get("Repository")),
                    github_username=_none_if_empty(row.get("GithubUsername")),
                    github_repo=_none_if_empty(row.get("GithubRepo")),
                    description=row.get("DescriptionText") or "",
                    columns={col: row.get(col) or "" for col in DESCRIPTIVE_COLUMNS},
                )
            )
        return packages

    def installed_names(self, library_paths: Optional[Sequence[str]] = None) -> set[str]:
        proc = self._run(INSTALLED_NAMES_EXPR, list(library_paths or []))
        return {line.strip() for line in proc.stdout.splitlines() if line.strip()}

    def install_from_cran(self, names: Sequence[str], lib: Optional[str] = None) -> None:
        if not names:
            return
        self._run(CRAN_INSTALL_EXPR, [lib or "", self.cran_mirror, *names])

    def ensure_package(self, name: str, lib: Optional[str] = None) -> None:
        self._run(ENSURE_EXPR, [lib or "", self.cran_mirror, name])

    def install_from_bioconductor(
        self, names: Sequence[str], lib: Optional[str] = None, manager: str = DEFAULT_BIOC_MANAGER
    ) -> None:
        if not names:
            return
        self._run(BIOC_INSTALL_EXPR, [lib or "", self.cran_mirror, manager, *names])

    def install_from_github(
        self, repo: str, lib: Optional[str] = None, helper: str = DEFAULT_GITHUB_HELPER
    ) -> None:
        self._run(GITHUB_INSTALL_EXPR, [lib or "", self.cran_mirror, helper, repo])
