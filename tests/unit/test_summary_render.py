from __future__ import annotations

import re
from datetime import datetime, timezone

from ad_enricher.models.run_summary import RunSummary
from ad_enricher.services.summary import (
    html_list,
    render_failure_html,
    render_subject,
    render_summary_html,
    render_summary_line,
)

"""Unit tests for the summary renderers (SUMMARY log line, mail subject and body)."""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+rows=([0-9]+)\s+matched=([0-9]+)\s+attributes=(\S*)\s+"
    r"errors=([0-9]+)\s+elapsed_sec=([0-9]+\.?[0-9]*)$"
)


def test_render_summary_line():
    summary = RunSummary(
        row_count=3,
        matched_count=2,
        attributes=("adMail", "adEnabled"),
        start_time=datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc),
        end_time=datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc),
    )
    line = render_summary_line(summary)
    match = SUMMARY_PATTERN.match(line)
    assert match, f"SUMMARY line should match regex: {line}"
    assert match.group(1) == "3"
    assert match.group(2) == "2"
    assert match.group(3) == "adMail,adEnabled"
    assert match.group(4) == "0"
    assert match.group(5) == "2"


def test_render_summary_line_fractional_elapsed():
    summary = RunSummary(
        row_count=0,
        matched_count=0,
        attributes=(),
        start_time=datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc),
        end_time=datetime(2024, 1, 1, 10, 0, 1, 500000, tzinfo=timezone.utc),
    )
    assert render_summary_line(summary).endswith("elapsed_sec=1.50")


def test_subject_without_and_with_errors():
    assert render_subject(RunSummary(3, 2, ("adMail",))) == "3 rows, 2 matched"
    assert render_subject(RunSummary(3, 2, ("adMail",), error_count=1)) == "3 rows, 2 matched, 1 errors"


def test_summary_html_contains_counts_and_attribute_list():
    html = render_summary_html(RunSummary(3, 2, ("adMail", "adEnabled")), "users.xlsx", [])
    assert "<td>3</td>" in html
    assert "<td>2</td>" in html
    assert "<td>1</td>" in html  # not found
    assert "<ul><li>adMail</li><li>adEnabled</li></ul>" in html
    assert "Errors" not in html


def test_summary_html_lists_errors():
    html = render_summary_html(RunSummary(1, 1, ("adManager",), error_count=1), "u.xlsx", ["<bad> manager"])
    assert "&lt;bad&gt; manager" in html
    assert "'Errors' worksheet" in html


def test_html_list_empty():
    assert html_list([]) == ""


def test_render_failure_html_escapes():
    html = render_failure_html("Job", "load", "file <x> missing")
    assert "file &lt;x&gt; missing" in html
    assert "'load'" in html
