import datetime
import re
from pathlib import Path


def ensure_dir(s: str | Path) -> None:
    """Recursively create a directory if it does not exist"""
    path = Path(s)
    path.mkdir(parents=True, exist_ok=True)


def major_minor(version: str) -> str:
    """Return the 'major.minor' prefix of an R version string.

    Parameters
    ----------
    version : str
        An R version such as "4.3.1" or "4.4"

    Returns
    -------
    str
        eg. "4.3" for "4.3.1"

    Raises
    ------
    ValueError
        If `version` does not start with a major.minor pair
    """
    match = re.match(r"^\s*(\d+)\.(\d+)", version)
    if match is None:
        raise ValueError(f"'{version}' is not an R version")
    return f"{match.group(1)}.{match.group(2)}"


def today() -> str:
    return datetime.date.today().isoformat()
