from enum import Enum


DEFAULT_RSCRIPT = "Rscript"
DEFAULT_CRAN_MIRROR = "https://cloud.r-project.org"
DEFAULT_FILE_PREFIX = "Rpackages"
DEFAULT_GITHUB_HELPER = "devtools"
DEFAULT_BIOC_MANAGER = "BiocManager"

CONFIG_ENV_VAR = "RSHIP_CONFIG"
DEFAULT_CONFIG_PATH = "~/.config/rship/config.yaml"

# record columns
NAME_COLUMN = "Package"
VERSION_COLUMN = "Version"
LOCATION_COLUMN = "location"

# descriptive columns kept from installed.packages(), in output order
DESCRIPTIVE_COLUMNS = [
    "LibPath",
    "Priority",
    "Depends",
    "Imports",
    "NeedsCompilation",
    "Built",
]

CRAN = "CRAN"
BIOCONDUCTOR = "Bioconductor"
GITHUB_LOCATION_PREFIX = "GitHub; repo = "
OTHER_LOCATION = "Other"
BASE_PRIORITY = "base"


class RepositoryKind(str, Enum):
    CRAN = "CRAN"
    BIOCONDUCTOR = "Bioconductor"
    GITHUB = "GitHub"
