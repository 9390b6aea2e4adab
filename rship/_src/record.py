"""Read and write package inventories as CSV records.

Column layout: `Package`, `Version`, the descriptive columns, `location`.
The source classification is serialized to the `location` string here and
nowhere else.
"""
import csv
from pathlib import Path

from pydantic import ValidationError

from rship._src.constants import LOCATION_COLUMN, NAME_COLUMN, VERSION_COLUMN
from rship._src.exceptions import RecordFormatError
from rship._src.models.inventory import Inventory
from rship._src.models.package import PackageRecord, parse_location


REQUIRED_COLUMNS = [NAME_COLUMN, VERSION_COLUMN, LOCATION_COLUMN]


def record_filename(prefix: str, r_version: str, date: str) -> str:
    return f"{prefix}_R-{r_version}_{date}.csv"


def write_record(inventory: Inventory, path: str | Path) -> None:
    descriptive = []
    for pkg in inventory:
        for col in pkg.columns:
            if col not in descriptive and col not in REQUIRED_COLUMNS:
                descriptive.append(col)
    header = [NAME_COLUMN, VERSION_COLUMN, *descriptive, LOCATION_COLUMN]

    with open(path, "w", newline="") as file:
        writer = csv.DictWriter(file, fieldnames=header)
        writer.writeheader()
        for pkg in inventory:
            row = {col: pkg.columns.get(col, "") for col in descriptive}
            row[NAME_COLUMN] = pkg.name
            row[VERSION_COLUMN] = pkg.version
            row[LOCATION_COLUMN] = pkg.location
            writer.writerow(row)


def read_record(path: str | Path) -> Inventory:
    path = Path(path)
    with open(path, "r", newline="") as file:
        reader = csv.DictReader(file)
        header = reader.fieldnames or []
        missing = [col for col in REQUIRED_COLUMNS if col not in header]
        if missing:
            raise RecordFormatError(path, f"missing column(s) {', '.join(missing)}")

        packages = []
        for lineno, row in enumerate(reader, start=2):
            # DictReader fills the columns of a short row with None
            if row[NAME_COLUMN] is None or row[LOCATION_COLUMN] is None:
                raise RecordFormatError(path, f"line {lineno}: expected {len(header)} fields")
            try:
                source = parse_location(row[LOCATION_COLUMN])
            except ValueError as e:
                raise RecordFormatError(path, f"line {lineno}: {e}") from e
            packages.append(
                PackageRecord(
                    name=row[NAME_COLUMN],
                    version=row[VERSION_COLUMN] or "",
                    source=source,
                    columns={
                        col: row[col] or ""
                        for col in header
                        if col not in REQUIRED_COLUMNS
                    },
                )
            )

    try:
        return Inventory(packages=packages, **_parse_filename(path.name))
    except ValidationError as e:
        raise RecordFormatError(path, e.errors()[0]["msg"]) from e


def _parse_filename(name: str) -> dict:
    """Recover the R version and date from a record file name, if it has
    the layout `record_filename` produces.
    """
    stem = name.rsplit(".", 1)[0]
    parts = stem.rsplit("_", 2)
    if len(parts) == 3 and parts[1].startswith("R-"):
        return {"r_version": parts[1][2:], "created": parts[2]}
    return {}
