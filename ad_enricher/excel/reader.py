from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from ad_enricher.models.row_record import RowRecord

"""Excel reader.

Only the first worksheet is read. Its first row is the header; every following
row that is not completely empty becomes one RowRecord. Cells are read as
objects so that ids like 00123 or 1234 are handed to the directory lookup the
way the sheet holds them.
"""

HEADER_ROW_NUMBER = 1  # Excel row number of the header


class InputError(Exception):
    """Raised when the input workbook cannot be used."""


class SheetHeaderError(InputError):
    """Raised when the header row is missing or invalid."""


class MissingColumnsError(InputError):
    """Raised when expected columns are missing in sheet header."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[dict[str, Any]]  # 正規化済 (列名→値)
    row_numbers: list[int]  # Excel row number per entry in `rows`


def read_excel_file(path: Path) -> tuple[str, pd.DataFrame]:
    """Read the first worksheet of `path` without applying a header.

    Returns the sheet name and the raw DataFrame.
    """
    if not path.exists():
        raise InputError(f"excel file not found: {path}")
    if not path.is_file():
        raise InputError(f"excel path is not a file: {path}")
    try:
        xls = pd.ExcelFile(path, engine="openpyxl")
        name = str(xls.sheet_names[0])
        df = xls.parse(name, header=None, dtype=object)
    except Exception as e:
        raise InputError(f"failed to read excel file {path}: {e}") from e
    return name, df


def normalize_sheet(
    df: pd.DataFrame,
    sheet_name: str,
    expected_columns: Iterable[str] | None = None,
) -> SheetData:
    """Normalize a raw DataFrame using the first row as header.

    Steps:
    1. Validate a header row exists
    2. Extract column names from the first row
    3. Remaining non-empty rows become data rows (NaN -> None)
    4. Validate expected columns subset
    """
    if df.shape[0] < 1:
        raise SheetHeaderError(f"sheet '{sheet_name}' has no header row")
    header_series = df.iloc[0]
    columns = [str(c).strip() if not pd.isna(c) else "" for c in header_series.tolist()]
    if not any(columns):
        raise SheetHeaderError(f"sheet '{sheet_name}' has an empty header row")

    if expected_columns is not None:
        missing = set(expected_columns) - set(columns)
        if missing:
            raise MissingColumnsError(f"sheet '{sheet_name}' missing columns: {sorted(missing)}")

    rows: list[dict[str, Any]] = []
    row_numbers: list[int] = []
    for offset, (_, raw) in enumerate(df.iloc[1:].iterrows(), start=HEADER_ROW_NUMBER + 1):
        if raw.isna().all():
            continue
        row_dict: dict[str, Any] = {}
        for col, val in zip(columns, raw.tolist(), strict=False):
            if not col:
                # 列名なしの列は出力対象外
                continue
            row_dict[col] = None if pd.isna(val) else val
        rows.append(row_dict)
        row_numbers.append(offset)

    return SheetData(sheet_name=sheet_name, columns=[c for c in columns if c], rows=rows, row_numbers=row_numbers)


def load_rows(path: Path, expected_columns: Iterable[str] | None = None) -> tuple[list[str], list[RowRecord]]:
    """Load the first worksheet of `path` as RowRecords.

    Returns the header column names (in sheet order) and the rows.

    Raises:
        InputError: path missing, unreadable, no header, or a column from
            `expected_columns` absent from the header.
    """
    sheet_name, df = read_excel_file(path)
    sheet = normalize_sheet(df, sheet_name, expected_columns=expected_columns)
    records = [
        RowRecord(row_number=number, values=values)
        for number, values in zip(sheet.row_numbers, sheet.rows, strict=True)
    ]
    return sheet.columns, records
