# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Sequence
from contextlib import nullcontext
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from ad_enricher.directory.client import DirectoryEntry
from ad_enricher.directory.query import DirectoryQuery
from ad_enricher.logging.init import reset_logging


class FakeDirectory:
    """In-memory DirectoryClient: equality on attribute values, case-insensitive names."""

    def __init__(self, entries: list[dict[str, Any]] | None = None) -> None:
        self.entries: list[dict[str, Any]] = list(entries or [])
        self.queries: list[DirectoryQuery] = []
        self.display_names: dict[str, str] = {}
        self.fail_with: Exception | None = None
        self.display_name_error: Exception | None = None

    @staticmethod
    def _get(entry: dict[str, Any], attribute: str) -> Any:
        for k, v in entry.items():
            if k.lower() == attribute.lower():
                return v
        return None

    def find_one(self, query: DirectoryQuery, attributes: Sequence[str]) -> DirectoryEntry | None:
        query.to_ldap_filter()  # same rejection of empty values as the ldap client
        self.queries.append(query)
        if self.fail_with is not None:
            raise self.fail_with
        for entry in self.entries:
            ok = True
            for clause in query.clauses:
                value = self._get(entry, clause.field)
                ok = ok and value is not None and str(value) == clause.value
            if ok:
                return DirectoryEntry(
                    dn=entry["dn"],
                    attributes={a: self._get(entry, a) for a in attributes},
                )
        return None

    def get_display_name(self, dn: str) -> str | None:
        if self.display_name_error is not None:
            raise self.display_name_error
        return self.display_names.get(dn)


class FakeMailer:
    def __init__(self, fail_with: Exception | None = None) -> None:
        self.sent: list[Any] = []
        self.fail_with = fail_with

    def send(self, message: Any) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(message)


def make_excel(path: Path, rows: list[list[object]]) -> Path:
    """Write `rows` (first row = header) to the first sheet of `path`."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="Sheet1", header=False, index=False)
    return path


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("LDAP_USER", raising=False)
        monkeypatch.delenv("LDAP_PASSWORD", raising=False)
        monkeypatch.delenv("SMTP_USER", raising=False)
        monkeypatch.delenv("SMTP_PASSWORD", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """job:
  script_name: AD enrich
  excel_file: ./data/users.xlsx
  match:
    Logon name: SamAccountName
  ad_properties: [Mail, Enabled]
  mail_to: [desk@contoso.com]
  log_folder: ./logs
  script_admin: [admin@contoso.com]
directory:
  server: dc01.contoso.com
  base_dn: DC=contoso,DC=com
smtp:
  host: smtp.contoso.com
  from_address: enricher@contoso.com
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "enrich.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def users_excel(temp_workdir: Path) -> Path:
    return make_excel(
        temp_workdir / "data" / "users.xlsx",
        [
            ["Logon name", "Department"],
            ["bob", "Sales"],
            ["alice", "IT"],
            ["ghost", "HR"],
        ],
    )


@pytest.fixture()
def fake_directory() -> FakeDirectory:
    return FakeDirectory([
        {
            "dn": "CN=Bob Lee,OU=Users,OU=BEL,DC=contoso,DC=com",
            "SamAccountName": "bob",
            "Mail": "bob@contoso.com",
            "Enabled": True,
            "CanonicalName": "contoso.com/BEL/Users/Bob Lee",
            "Manager": "CN=Alice Ray,OU=Users,OU=BEL,DC=contoso,DC=com",
        },
        {
            "dn": "CN=Alice Ray,OU=Users,OU=BEL,DC=contoso,DC=com",
            "SamAccountName": "alice",
            "Mail": "alice@contoso.com",
            "Enabled": False,
            "CanonicalName": "contoso.com/BEL/Users/Alice Ray",
        },
    ])


@pytest.fixture()
def directory_factory(fake_directory: FakeDirectory):
    return lambda cfg: nullcontext(fake_directory)


@pytest.fixture()
def fake_mailer() -> FakeMailer:
    return FakeMailer()
