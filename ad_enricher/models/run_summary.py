from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""RunSummary model: counters reported in the SUMMARY log line and the mail."""


@dataclass(frozen=True)
class RunSummary:
    """Aggregated result of one enrichment run.

    Computed once after the derived columns are added; consumed by the summary
    renderers and the notification step.
    """
    row_count: int  # Data rows loaded from the input workbook
    matched_count: int  # Rows whose lookup returned an entry
    attributes: tuple[str, ...]  # Added output columns (`adMail`, ..., `adOu`)
    error_count: int = 0  # Unique messages written to the Errors sheet
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def unmatched_count(self) -> int:
        return self.row_count - self.matched_count

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()
