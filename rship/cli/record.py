import sys
from collections import Counter
from contextlib import contextmanager
from typing import List

import rich
import typer
from rich.markup import escape
from rich.table import Table
from typing_extensions import Annotated

from rship._src.exceptions import RshipError
from rship._src.models.package import repository_kind
from rship._src.reconcile import parse_repository_kinds
from rship._src.record import read_record


record_command = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


@contextmanager
def handle_errors():
    """Report rship errors as a message and exit code 1 instead of a traceback"""
    try:
        yield
    except (RshipError, OSError) as e:
        rich.print(f"[red]error:[/red] {escape(str(e))}", file=sys.stderr)
        raise typer.Exit(code=1)


def location_counts(inventory) -> Counter:
    counts = Counter()
    for pkg in inventory:
        kind = repository_kind(pkg.source)
        counts[kind.value if kind else str(pkg.source)] += 1
    return counts


def records_table(records, title: str) -> Table:
    table = Table(title=title)
    table.add_column("Package", justify="left", no_wrap=True)
    table.add_column("Version", justify="left", no_wrap=True)
    table.add_column("location", justify="left", no_wrap=True)

    for pkg in records:
        table.add_row(pkg.name, pkg.version, pkg.location)
    return table


@record_command.command()
def show(
    ctx: typer.Context,
    file: Annotated[str, typer.Option("--file", "-f", help="path to the package record")],
    kind: List[str] = typer.Option(
        None,
        "--kind", "-k",
        help="only show packages from this repository (CRAN, Bioconductor, GitHub)"
    ),
):
    """List the packages in a package record"""
    with handle_errors():
        inventory = read_record(file)

    records = inventory.packages
    if kind:
        selected = parse_repository_kinds(kind)
        records = [pkg for pkg in records if repository_kind(pkg.source) in selected]

    title = f"R {inventory.r_version} packages" if inventory.r_version else "Packages"
    rich.print(records_table(records, title))


@record_command.command()
def summary(
    ctx: typer.Context,
    file: Annotated[str, typer.Option("--file", "-f", help="path to the package record")],
):
    """Count the packages in a package record per repository"""
    with handle_errors():
        inventory = read_record(file)

    counts = location_counts(inventory)

    table = Table(title=f"{len(inventory)} packages")
    table.add_column("repository", justify="left", no_wrap=True)
    table.add_column("packages", justify="right", no_wrap=True)
    for name, count in counts.most_common():
        table.add_row(name, str(count))
    rich.print(table)
