from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""RowRecord model for the Excel -> directory enricher.

A RowRecord is one spreadsheet data row plus the directory attributes attached
to it. Original cells and directory attributes are kept apart so that an
attribute can never overwrite an input column; they are only merged when the
row is flattened for output.
"""

__all__ = [
    "AD_PREFIX",
    "RowRecord",
    "ad_column",
]

AD_PREFIX = "ad"

# Attributes with derived behaviour always get the same column name
FIXED_SPELLING = {
    "manager": "Manager",
    "canonicalname": "CanonicalName",
}


def ad_column(attribute: str) -> str:
    """Output column name for a directory attribute (`Mail` -> `adMail`, `manager` -> `adManager`)."""
    return f"{AD_PREFIX}{FIXED_SPELLING.get(attribute.lower(), attribute)}"


@dataclass
class RowRecord:
    """One spreadsheet row during a run.

    Created by the loader, mutated once by the enrichment stage and once by the
    derived-column step, then consumed by the writer.
    """
    row_number: int  # Excel row number (header = 1, first data row = 2)
    values: dict[str, Any]  # Original column name -> cell value, header order
    directory: dict[str, Any] = field(default_factory=dict)  # Attribute -> value
    computed: dict[str, Any] = field(default_factory=dict)  # Output column -> value
    matched: bool = False

    def attach(self, attributes: list[str] | tuple[str, ...], source: dict[str, Any] | None) -> None:
        """Attach every requested attribute, empty when `source` has no value."""
        for attribute in attributes:
            self.directory[attribute] = None if source is None else source.get(attribute)

    def to_output(self) -> dict[str, Any]:
        """Flatten into output column -> value (original, `ad*`, computed)."""
        out = dict(self.values)
        for attribute, value in self.directory.items():
            out[ad_column(attribute)] = value
        out.update(self.computed)
        return out
