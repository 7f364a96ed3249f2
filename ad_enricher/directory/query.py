from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ldap3.utils.conv import escape_filter_chars

"""Typed directory query builder.

A DirectoryQuery is a conjunction of equality clauses, one per entry of the
match mapping (spreadsheet column -> directory attribute). Cell values are
used verbatim but always escaped when rendered, so a value such as `a*b` or
`Smith (ext)` cannot change the meaning of the filter. An empty cell never
matches anything: the query reports it in `empty_fields` and refuses to render.
"""

__all__ = [
    "EqualityClause",
    "DirectoryQuery",
    "format_value",
]


def format_value(value: Any) -> str | None:
    """Text used for comparison; None for empty cells.

    Integral floats (1234.0, as spreadsheets often store ids) are rendered
    without the decimal part.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value)
    return text if text != "" else None


@dataclass(frozen=True)
class EqualityClause:
    field: str
    value: str | None  # None: empty cell, the clause can never match

    def to_ldap(self) -> str:
        if self.value is None:
            raise ValueError(f"no value to match for '{self.field}'")
        return f"({self.field}={escape_filter_chars(self.value)})"


@dataclass(frozen=True)
class DirectoryQuery:
    clauses: tuple[EqualityClause, ...]
    object_class: str | None = "user"

    @classmethod
    def from_row(
        cls,
        match: Mapping[str, str],
        row: Mapping[str, Any],
        object_class: str | None = "user",
    ) -> DirectoryQuery:
        clauses = tuple(
            EqualityClause(field=attribute, value=format_value(row.get(column)))
            for column, attribute in match.items()
        )
        return cls(clauses=clauses, object_class=object_class)

    @property
    def empty_fields(self) -> list[str]:
        """Attributes whose cell was empty. Such a query must not be sent."""
        return [c.field for c in self.clauses if c.value is None]

    def to_ldap_filter(self) -> str:
        parts = [c.to_ldap() for c in self.clauses]
        if self.object_class:
            parts.insert(0, f"(objectClass={escape_filter_chars(self.object_class)})")
        if len(parts) == 1:
            return parts[0]
        return "(&" + "".join(parts) + ")"

    def describe(self) -> str:
        """Readable form for log messages."""
        return " AND ".join(
            f"{c.field} -eq '{c.value}'" if c.value is not None else f"{c.field} -eq <empty>"
            for c in self.clauses
        )
