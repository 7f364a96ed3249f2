from __future__ import annotations

from ad_enricher.models.error_record import ErrorRecord

"""Error log buffering module.

Collects non-fatal ErrorRecords for the whole run. The buffer is reported, not
recovered from: its unique messages become the Errors worksheet of the output
workbook. Serial execution only, no thread safety needed.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]


class ErrorLogBuffer:
    """In-memory, insertion-ordered buffer of error records.

    Records are kept as appended; `messages()` de-duplicates on message text so
    the same failure hit by many rows is reported once.
    """
    def __init__(self) -> None:
        self._records: list[ErrorRecord] = []

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def add(self, stage: str, row: int, error_type: str, message: str) -> ErrorRecord:
        record = ErrorRecord.create(stage, row, error_type, message)
        self.append(record)
        return record

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    def messages(self) -> list[str]:
        """Unique messages in first-seen order."""
        return list(dict.fromkeys(r.message for r in self._records))
