import pytest

from fakes import FakeRuntime
from rship._src.exceptions import ConfigurationError
from rship._src.inventory import build_inventory, check_library_version, classify, save_inventory
from rship._src.models.package import InstalledPackage, Registry, SourceControl, Unknown
from rship._src.record import read_record


def installed(name, **kwargs):
    kwargs.setdefault("version", "1.0.0")
    return InstalledPackage(name=name, **kwargs)


class TestClassify:
    def test_repository_field_wins(self):
        pkg = installed(
            "dplyr",
            repository="CRAN",
            github_username="tidyverse",
            github_repo="dplyr",
            description="mentions bioconductor",
        )
        assert classify(pkg) == Registry(name="CRAN")

    def test_github_fields_before_bioconductor_text(self):
        pkg = installed(
            "ggbio",
            github_username="someone",
            github_repo="ggbio",
            description="biocViews: Bioconductor",
        )
        assert classify(pkg) == SourceControl(owner="someone", repo="ggbio")

    def test_github_needs_both_fields(self):
        pkg = installed("half", github_repo="half")
        assert classify(pkg) == Unknown()

    def test_bioconductor_text_is_case_insensitive(self):
        pkg = installed("limma", description="Package: limma\nA BIOCONDUCTOR package")
        assert classify(pkg) == Registry(name="Bioconductor")

    def test_bioconductor_package(self):
        pkg = installed("limma", repository=None, description="Bioconductor package")
        assert classify(pkg) == Registry(name="Bioconductor")

    def test_nothing_known(self):
        assert classify(installed("inhouse", description="Package: inhouse")) == Unknown()


def test_build_inventory_drops_base_packages():
    runtime = FakeRuntime(
        packages=[
            installed("stats", priority="base", columns={"Priority": "base"}),
            installed("MASS", priority="recommended", repository="CRAN", columns={"Priority": "recommended"}),
            installed("dplyr", repository="CRAN"),
        ]
    )

    inventory = build_inventory(runtime)

    assert inventory.names == ["MASS", "dplyr"]
    assert all(pkg.columns.get("Priority") != "base" for pkg in inventory)
    assert inventory.get("MASS").columns["Priority"] == "recommended"


def test_build_inventory_keeps_first_copy_of_shadowed_package():
    runtime = FakeRuntime(
        packages=[
            installed("dplyr", version="1.1.4", repository="CRAN"),
            installed("dplyr", version="1.0.0", repository="CRAN"),
        ]
    )

    inventory = build_inventory(runtime)

    assert len(inventory) == 1
    assert inventory.get("dplyr").version == "1.1.4"


def test_build_inventory_uses_runtime_version_and_paths():
    runtime = FakeRuntime(r_version="4.4.0", packages=[installed("dplyr", repository="CRAN")])

    inventory = build_inventory(runtime)

    assert inventory.r_version == "4.4.0"
    assert runtime.calls == [("installed_packages", runtime.library_paths())]


def test_build_inventory_explicit_library():
    runtime = FakeRuntime(packages=[installed("dplyr", repository="CRAN")])

    inventory = build_inventory(runtime, library_path="/opt/R/4.2/library", r_version="4.2.3")

    assert inventory.r_version == "4.2.3"
    assert runtime.calls == [("installed_packages", ["/opt/R/4.2/library"])]


def test_build_inventory_rejects_mismatched_version_before_enumerating():
    runtime = FakeRuntime(packages=[installed("dplyr", repository="CRAN")])

    with pytest.raises(ConfigurationError):
        build_inventory(runtime, library_path="/opt/R/4.2/library", r_version="4.3.1")
    assert runtime.calls == []


class TestCheckLibraryVersion:
    def test_compares_major_minor_only(self):
        check_library_version(["/home/user/R/x86_64-pc-linux-gnu-library/4.3"], "4.3.1")

    def test_any_search_path_may_match(self):
        check_library_version(["/usr/lib/R/library", "/home/user/R/library/4.3"], "4.3.2")

    def test_mismatch(self):
        with pytest.raises(ConfigurationError):
            check_library_version(["/home/user/R/library/4.2"], "4.3.1")

    def test_not_a_version(self):
        with pytest.raises(ConfigurationError):
            check_library_version(["/home/user/R/library/4.3"], "devel")


def test_save_inventory_names_file_after_version_and_date(tmp_path, inventory):
    path = save_inventory(inventory, output_dir=tmp_path / "records", prefix="Rpackages")

    assert path == tmp_path / "records" / "Rpackages_R-4.3.1_2026-10-19.csv"
    assert read_record(path).names == inventory.names
