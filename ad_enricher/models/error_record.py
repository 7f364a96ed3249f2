from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

"""ErrorRecord model for non-fatal run errors.

Errors that do not abort the run (a manager that cannot be resolved, a canonical
name that cannot be converted) are collected as ErrorRecords and reported in
the Errors worksheet of the output workbook. Only the message text ends up in
the worksheet; the other fields go to the run log.

`row` uses -1 as a sentinel for errors that are not tied to a data row.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured non-fatal error.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        stage: Pipeline stage that raised the error (load, enrich, derive, output)
        row: Excel row number. Use -1 when the error is not tied to a row
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable error text
    """
    timestamp: str  # ISO8601 UTC
    stage: str
    row: int  # 行番号。不明な場合 -1 許容
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(stage: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            stage=stage,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_log_line(self) -> str:
        """One-line rendering for the run log."""
        where = f"row={self.row}" if self.row >= 0 else "row=-"
        return f"{self.stage} {where} {self.error_type}: {self.message}"
