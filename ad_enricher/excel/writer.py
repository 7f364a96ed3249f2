from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd

"""Excel writer for the enriched workbook.

Sheets:
- Data:   one row per input row, original columns first, then the `ad*`
          columns in requested order, then computed columns (adOu)
- Errors: unique non-fatal error messages (only when there are any)

Each sheet gets a frozen header row and an autofilter.
"""

logger = logging.getLogger(__name__)

DATA_SHEET = "Data"
ERRORS_SHEET = "Errors"
ERRORS_COLUMN = "Error"


def build_data_frame(columns: list[str], rows: list[dict[str, Any]]) -> pd.DataFrame:
    """DataFrame with exactly `columns`, in order; missing keys become empty cells."""
    return pd.DataFrame([[row.get(c) for c in columns] for row in rows], columns=columns, dtype=object)


def _format_sheet(worksheet: Any) -> None:
    worksheet.freeze_panes = "A2"
    worksheet.auto_filter.ref = worksheet.dimensions


def write_workbook(
    path: Path,
    columns: list[str],
    rows: list[dict[str, Any]],
    errors: list[str],
) -> Path | None:
    """Write the Data / Errors sheets to `path`.

    Returns the written path, or None when there was neither a row nor an error
    to write (no file is created in that case).
    """
    if not rows and not errors:
        logger.info("no rows and no errors: output workbook not created")
        return None

    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        if rows:
            build_data_frame(columns, rows).to_excel(writer, sheet_name=DATA_SHEET, index=False)
            _format_sheet(writer.sheets[DATA_SHEET])
        if errors:
            pd.DataFrame({ERRORS_COLUMN: errors}).to_excel(writer, sheet_name=ERRORS_SHEET, index=False)
            _format_sheet(writer.sheets[ERRORS_SHEET])
    logger.info(f"workbook written: {path} rows={len(rows)} errors={len(errors)}")
    return path
