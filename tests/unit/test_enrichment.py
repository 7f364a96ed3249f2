from __future__ import annotations

from unittest.mock import patch

import pytest
from conftest import FakeDirectory
from ldap3.core.exceptions import LDAPSocketOpenError

from ad_enricher.models.row_record import RowRecord
from ad_enricher.services.enrichment import enrich_row, enrich_rows

MATCH = {"Logon name": "SamAccountName"}


def _rows(*logons: object) -> list[RowRecord]:
    return [RowRecord(row_number=i + 2, values={"Logon name": v}) for i, v in enumerate(logons)]


def test_enrich_rows_counts_matches(fake_directory: FakeDirectory):
    rows = _rows("bob", "alice", "ghost")
    matched = enrich_rows(rows, MATCH, ["Mail", "Enabled"], fake_directory)
    assert matched == 2
    assert rows[0].directory == {"Mail": "bob@contoso.com", "Enabled": True}
    assert rows[1].directory == {"Mail": "alice@contoso.com", "Enabled": False}
    assert [r.matched for r in rows] == [True, True, False]


def test_unmatched_row_gets_every_attribute_empty(fake_directory: FakeDirectory):
    rows = _rows("ghost")
    enrich_rows(rows, MATCH, ["Mail", "Enabled"], fake_directory)
    assert rows[0].directory == {"Mail": None, "Enabled": None}
    assert rows[0].to_output() == {"Logon name": "ghost", "adMail": None, "adEnabled": None}


def test_absent_attribute_on_matched_entry_is_empty(fake_directory: FakeDirectory):
    rows = _rows("alice")
    enrich_rows(rows, MATCH, ["Mail", "Manager"], fake_directory)
    assert rows[0].matched is True
    assert rows[0].directory["Manager"] is None


def test_at_most_one_lookup_per_row(fake_directory: FakeDirectory):
    rows = _rows("bob", "ghost", "alice")
    enrich_rows(rows, MATCH, ["Mail"], fake_directory)
    assert len(fake_directory.queries) == 3


def test_empty_match_cell_is_not_looked_up(fake_directory: FakeDirectory):
    rows = _rows(None, "")
    with patch("ad_enricher.services.enrichment.logger") as mock_logger:
        matched = enrich_rows(rows, MATCH, ["Mail", "Enabled"], fake_directory)
    assert matched == 0
    assert fake_directory.queries == []
    assert [r.matched for r in rows] == [False, False]
    assert rows[0].directory == {"Mail": None, "Enabled": None}
    assert "empty match value for SamAccountName" in mock_logger.warning.call_args_list[0][0][0]


def test_no_match_logs_warning(fake_directory: FakeDirectory):
    rows = _rows("ghost")
    with patch("ad_enricher.services.enrichment.logger") as mock_logger:
        assert enrich_row(rows[0], MATCH, ["Mail"], fake_directory) is False
    mock_logger.warning.assert_called_once()
    assert "no directory entry found" in mock_logger.warning.call_args[0][0]


def test_lookup_failure_propagates(fake_directory: FakeDirectory):
    fake_directory.fail_with = LDAPSocketOpenError("unreachable")
    rows = _rows("bob", "alice")
    with pytest.raises(LDAPSocketOpenError):
        enrich_rows(rows, MATCH, ["Mail"], fake_directory)
    assert len(fake_directory.queries) == 1


def test_object_class_is_passed_to_query(fake_directory: FakeDirectory):
    rows = _rows("bob")
    enrich_rows(rows, MATCH, ["Mail"], fake_directory, object_class="contact")
    assert fake_directory.queries[0].object_class == "contact"
