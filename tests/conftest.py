"""Pytest configuration and fixtures."""

import pytest

from fakes import FakeRuntime
from rship._src.models.inventory import Inventory
from rship._src.models.package import PackageRecord, Registry, SourceControl, Unknown


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep the user's config file and RSHIP_* variables out of tests."""
    for var in ["RSHIP_CONFIG", "RSHIP_RSCRIPT", "RSHIP_CRAN_MIRROR", "RSHIP_OUTPUT_DIR", "RSHIP_LOG_LEVEL"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def inventory() -> Inventory:
    return Inventory(
        packages=[
            PackageRecord(name="dplyr", version="1.1.4", source=Registry(name="CRAN")),
            PackageRecord(name="limma", version="3.58.1", source=Registry(name="Bioconductor")),
            PackageRecord(
                name="ggbio",
                version="0.1.0",
                source=SourceControl(owner="someone", repo="ggbio"),
            ),
            PackageRecord(name="inhouse", version="0.0.9", source=Unknown()),
        ],
        r_version="4.3.1",
        created="2026-10-19",
    )


@pytest.fixture
def fake_runtime() -> FakeRuntime:
    return FakeRuntime(
        cran=["dplyr"],
        bioconductor=["limma"],
        github={"someone/ggbio": "ggbio"},
    )
