from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display service with tqdm (TTY only).

One bar for the directory lookups, advanced once per row. In non-TTY
environments (scheduled task, CI) the bar is disabled to avoid ANSI control
sequences in captured output; the log still reports the totals.
"""

__all__ = [
    "RowProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """True if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class RowProgress:
    """Progress tracker for per-row directory lookups."""

    def __init__(self, total_rows: int, *, description: str = "Directory lookups") -> None:
        self.total_rows = total_rows
        self.description = description
        self.current_row = 0

        # Create tqdm instance only if TTY is enabled
        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, matched: bool, matched_count: int) -> None:
        """Mark one row as done and refresh the matched/unmatched postfix."""
        self.current_row += 1
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_postfix(matched=matched_count, unmatched=self.current_row - matched_count)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> RowProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
