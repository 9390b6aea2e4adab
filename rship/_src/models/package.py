from typing import Annotated, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from rship._src.constants import (
    GITHUB_LOCATION_PREFIX,
    OTHER_LOCATION,
    RepositoryKind,
)


class Registry(BaseModel):
    """Package archive the package was installed from, eg. CRAN"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["registry"] = "registry"
    name: str

    def to_location(self) -> str:
        return self.name

    def __str__(self):
        return self.name


class SourceControl(BaseModel):
    """Package installed straight from a GitHub repository"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["source_control"] = "source_control"
    owner: str
    repo: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"

    def to_location(self) -> str:
        return f"{GITHUB_LOCATION_PREFIX}{self.slug}"


class Unknown(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["unknown"] = "unknown"

    def to_location(self) -> str:
        return OTHER_LOCATION

    def __str__(self):
        return OTHER_LOCATION


SourceClassification = Annotated[
    Union[Registry, SourceControl, Unknown],
    Field(discriminator="kind"),
]


def parse_location(location: str) -> Union[Registry, SourceControl, Unknown]:
    """Parse the serialized `location` column of a package record.

    Raises
    ------
    ValueError
        If a GitHub location does not hold an `owner/repo` pair.
    """
    location = location.strip()
    if location.startswith(GITHUB_LOCATION_PREFIX):
        slug = location[len(GITHUB_LOCATION_PREFIX):]
        owner, sep, repo = slug.partition("/")
        if not sep or not owner or not repo:
            raise ValueError(f"malformed GitHub location '{location}'")
        return SourceControl(owner=owner, repo=repo)
    if location == "" or location == OTHER_LOCATION:
        return Unknown()
    return Registry(name=location)


def repository_kind(source) -> Optional[RepositoryKind]:
    """Return the repository kind a classification installs from, if any."""
    if isinstance(source, SourceControl):
        return RepositoryKind.GITHUB
    if isinstance(source, Registry):
        for kind in (RepositoryKind.CRAN, RepositoryKind.BIOCONDUCTOR):
            if source.name == kind.value:
                return kind
    return None


class PackageRecord(BaseModel):
    """One row of a package inventory"""
    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    source: SourceClassification
    # descriptive metadata columns, carried through unmodified
    columns: Dict[str, str] = Field(default_factory=dict)

    @property
    def location(self) -> str:
        return self.source.to_location()

    def __str__(self):
        return f"{self.name} - {self.version} ({self.location})"


class InstalledPackage(BaseModel):
    """Per package metadata reported by the R runtime for a library"""
    name: str
    version: str
    priority: Optional[str] = None
    repository: Optional[str] = None
    github_username: Optional[str] = None
    github_repo: Optional[str] = None
    # full text of the package's DESCRIPTION record
    description: str = ""
    columns: Dict[str, str] = Field(default_factory=dict)
