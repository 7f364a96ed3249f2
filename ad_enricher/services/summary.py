from __future__ import annotations

from collections.abc import Iterable
from html import escape

from ..models.run_summary import RunSummary

"""Summary rendering for the SUMMARY log line and the result mail.

Log format:
SUMMARY rows={rows} matched={matched} attributes={a,b,...} errors={errors} elapsed_sec={elapsed}
"""


def _format_elapsed(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{seconds:.6f}".rstrip('0').rstrip('.')
    return f"{seconds:.2f}"


def render_summary_line(summary: RunSummary) -> str:
    """Render the SUMMARY log line.

    Examples:
        >>> render_summary_line(RunSummary(row_count=3, matched_count=2, attributes=("adMail",)))
        'SUMMARY rows=3 matched=2 attributes=adMail errors=0 elapsed_sec=0'
    """
    return (
        f"SUMMARY rows={summary.row_count} "
        f"matched={summary.matched_count} "
        f"attributes={','.join(summary.attributes)} "
        f"errors={summary.error_count} "
        f"elapsed_sec={_format_elapsed(summary.elapsed_seconds)}"
    )


def html_list(items: Iterable[object]) -> str:
    """Unordered HTML list; empty string when there are no items."""
    entries = "".join(f"<li>{escape(str(i))}</li>" for i in items)
    return f"<ul>{entries}</ul>" if entries else ""


def render_subject(summary: RunSummary) -> str:
    subject = f"{summary.row_count} rows, {summary.matched_count} matched"
    if summary.error_count:
        subject += f", {summary.error_count} errors"
    return subject


def render_summary_html(summary: RunSummary, excel_file: str, errors: list[str]) -> str:
    """HTML body of the result mail."""
    parts = [
        "<p>Summary:</p>",
        "<table>",
        f"<tr><th>Rows</th><td>{summary.row_count}</td></tr>",
        f"<tr><th>Matched accounts</th><td>{summary.matched_count}</td></tr>",
        f"<tr><th>Not found</th><td>{summary.unmatched_count}</td></tr>",
        "</table>",
        f"<p>Source file: {escape(excel_file)}</p>",
    ]
    if summary.attributes:
        parts.append("<p>Added columns:</p>")
        parts.append(html_list(summary.attributes))
    else:
        parts.append("<p>No columns added.</p>")
    if errors:
        parts.append("<p><b>Errors:</b> see the 'Errors' worksheet in the attachment.</p>")
        parts.append(html_list(errors))
    return "\n".join(parts)


def render_failure_html(script_name: str, stage: str, message: str) -> str:
    """HTML body of the FAILURE mail sent to script admins."""
    return "\n".join([
        f"<p><b>{escape(script_name)}</b> failed during stage '{escape(stage)}'.</p>",
        f"<p>{escape(message)}</p>",
    ])
