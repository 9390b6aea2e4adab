from typing import List

import rich
import typer
from typing_extensions import Annotated

from rship._src.config import RshipConfig, load_config
from rship._src.inventory import build_inventory, save_inventory
from rship._src.logging_utils import configure_logging
from rship._src.reconcile import Reconciler, plan
from rship._src.record import read_record
from rship._src.runtime import RRuntime, RscriptRuntime
from rship.cli.record import (
    handle_errors,
    location_counts,
    record_command,
    records_table,
)


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(
    record_command,
    name="record",
    help="inspect package records",
    rich_help_panel="Record",
)


def get_runtime(config: RshipConfig) -> RRuntime:
    return RscriptRuntime(rscript=config.rscript, cran_mirror=config.cran_mirror)


@app.callback()
def main(
    ctx: typer.Context,
    config: str = typer.Option(
        None,
        "--config",
        help="path to config file, defaults to ~/.config/rship/config.yaml"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="log every R command"
    ),
):
    """Snapshot an R library and reinstall it under another R version"""
    with handle_errors():
        ctx.obj = load_config(config)
    configure_logging("DEBUG" if verbose else ctx.obj.log_level)


@app.command()
def save(
    ctx: typer.Context,
    lib: str = typer.Option(
        None,
        help="library to inventory, defaults to .libPaths()"
    ),
    r_version: str = typer.Option(
        None,
        "--r-version",
        help="R version the library belongs to, eg. 4.3.1"
    ),
    output_dir: str = typer.Option(
        None,
        help="directory to write the package record to"
    ),
    prefix: str = typer.Option(
        None,
        help="file name prefix of the package record"
    ),
):
    """Write a package record for the installed packages"""
    config: RshipConfig = ctx.obj
    with handle_errors():
        runtime = get_runtime(config)
        inventory = build_inventory(runtime, library_path=lib, r_version=r_version)
        path = save_inventory(
            inventory,
            output_dir=output_dir or config.output_dir,
            prefix=prefix or config.file_prefix,
        )

    counts = location_counts(inventory)
    print(f"saved {len(inventory)} packages to {path}")
    for location, count in counts.most_common():
        print(f"  {location}: {count}")


@app.command()
def install(
    ctx: typer.Context,
    file: Annotated[str, typer.Option("--file", "-f", help="path to the package record")],
    kind: List[str] = typer.Option(
        None,
        "--kind", "-k",
        help="repository to install from (CRAN, Bioconductor, GitHub), defaults to all"
    ),
    omit: List[str] = typer.Option(
        None,
        help="package to leave out"
    ),
    lib: str = typer.Option(
        None,
        help="library to install into, defaults to the first of .libPaths()"
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="only show what would be installed"
    ),
):
    """Install the packages of a package record that are missing"""
    config: RshipConfig = ctx.obj
    with handle_errors():
        runtime = get_runtime(config)
        if dry_run:
            inventory = read_record(file)
            installed = runtime.installed_names([lib] if lib else None)
            install_plan = plan(inventory, installed, kinds=kind or None, omit=omit)
        else:
            reconciler = Reconciler(
                runtime,
                lib=lib,
                bioc_manager=config.bioc_manager,
                github_helper=config.github_helper,
            )
            result = reconciler.reconcile(record_path=file, kinds=kind or None, omit=omit)

    if dry_run:
        for repo, batch in install_plan.batches.items():
            print(f"\n{repo.value}: {len(batch)} packages")
            for pkg in batch:
                print(f"+ {pkg.name}")
        if install_plan.unassigned:
            print(f"\nnot installable from the selected repositories: {len(install_plan.unassigned)}")
            for pkg in install_plan.unassigned:
                print(f"? {pkg.name} ({pkg.location})")
        return

    notice = result.notice
    if notice is None:
        print("Done!")
        return

    print(notice.message)
    rich.print(records_table(result.remaining, "Still uninstalled"))
