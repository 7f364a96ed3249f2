from __future__ import annotations

import logging
from collections.abc import Sequence

from ldap3.core.exceptions import LDAPException

from ..directory.client import DirectoryClient, DirectoryError
from ..directory.names import canonical_name_to_ou
from ..logging.error_log import ErrorLogBuffer
from ..models.row_record import RowRecord, ad_column

"""Derived output columns.

Computed after enrichment because they depend on already fetched values:
- adOu:      organizational unit derived from the CanonicalName attribute
- adManager: the manager DN replaced by the manager's display name

Both are only computed when the raw attribute was requested. Failures are
non-fatal: they are recorded in the error log and leave the value empty.
"""

logger = logging.getLogger(__name__)

OU_COLUMN = "adOu"
CANONICAL_NAME = "canonicalname"
MANAGER = "manager"


def _requested(requested: Sequence[str], name: str) -> str | None:
    """Requested attribute spelled as configured, matched case-insensitively."""
    for attribute in requested:
        if attribute.lower() == name:
            return attribute
    return None


def add_ou_column(rows: list[RowRecord], attribute: str, error_log: ErrorLogBuffer) -> None:
    for row in rows:
        try:
            row.computed[OU_COLUMN] = canonical_name_to_ou(row.directory.get(attribute))
        except ValueError as e:
            row.computed[OU_COLUMN] = None
            error_log.add("derive", row.row_number, "CANONICAL_NAME_INVALID", str(e))


def resolve_managers(
    rows: list[RowRecord],
    attribute: str,
    directory: DirectoryClient,
    error_log: ErrorLogBuffer,
) -> None:
    for row in rows:
        dn = row.directory.get(attribute)
        if not dn:
            continue
        try:
            display_name = directory.get_display_name(str(dn))
        except (DirectoryError, LDAPException) as e:
            error_log.add("derive", row.row_number, "MANAGER_LOOKUP_FAILED", f"Failed to resolve manager '{dn}': {e}")
            display_name = None
        else:
            if display_name is None:
                logger.warning(f"row {row.row_number}: manager '{dn}' has no display name")
        row.directory[attribute] = display_name


def add_derived_columns(
    rows: list[RowRecord],
    requested: Sequence[str],
    directory: DirectoryClient,
    error_log: ErrorLogBuffer,
) -> list[str]:
    """Compute adOu / adManager. Returns the appended output column names."""
    appended: list[str] = []

    canonical = _requested(requested, CANONICAL_NAME)
    if canonical is not None:
        add_ou_column(rows, canonical, error_log)
        appended.append(OU_COLUMN)

    manager = _requested(requested, MANAGER)
    if manager is not None:
        resolve_managers(rows, manager, directory, error_log)
        logger.debug(f"manager display names resolved into {ad_column(manager)}")

    return appended
