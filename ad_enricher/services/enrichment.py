from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from ..directory.client import DirectoryClient
from ..directory.query import DirectoryQuery
from ..models.row_record import RowRecord
from .progress import RowProgress

"""Enrichment stage.

For each row: build a DirectoryQuery from the match mapping, run at most one
lookup and attach every requested attribute. A row with an empty match cell is
not looked up and counts as not found. Rows are processed strictly in
sequence. Lookup exceptions are not caught here; they abort the run.
"""

logger = logging.getLogger(__name__)


def enrich_row(
    row: RowRecord,
    match: Mapping[str, str],
    requested: Sequence[str],
    directory: DirectoryClient,
    object_class: str | None = "user",
) -> bool:
    """Enrich a single row in place. Returns True when an entry matched."""
    query = DirectoryQuery.from_row(match, row.values, object_class=object_class)
    empty = query.empty_fields
    if empty:
        row.attach(requested, None)
        row.matched = False
        logger.warning(f"row {row.row_number}: empty match value for {', '.join(empty)}, lookup skipped")
        return False
    entry = directory.find_one(query, requested)
    if entry is None:
        row.attach(requested, None)
        row.matched = False
        logger.warning(f"row {row.row_number}: no directory entry found for {query.describe()}")
        return False
    row.attach(requested, entry.attributes)
    row.matched = True
    logger.debug(f"row {row.row_number}: matched {entry.dn}")
    return True


def enrich_rows(
    rows: list[RowRecord],
    match: Mapping[str, str],
    requested: Sequence[str],
    directory: DirectoryClient,
    object_class: str | None = "user",
) -> int:
    """Enrich all rows. Returns the number of rows that matched an entry."""
    matched_count = 0
    with RowProgress(len(rows)) as progress:
        for row in rows:
            matched = enrich_row(row, match, requested, directory, object_class)
            if matched:
                matched_count += 1
            progress.advance(matched, matched_count)
    logger.info(f"enrichment done rows={len(rows)} matched={matched_count}")
    return matched_count
