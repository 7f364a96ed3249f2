from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

from ldap3 import BASE, NTLM, SIMPLE, SUBTREE, Connection, Server
from ldap3.core.exceptions import LDAPException

from ad_enricher.directory.query import DirectoryQuery
from ad_enricher.models.config_models import DirectoryConfig

"""Directory client abstraction and its ldap3 implementation.

The pipeline only needs two read operations:
- find_one: the single entry matching a DirectoryQuery (or None)
- get_display_name: the displayName of the entry with a given DN (or None)

Lookup failures raise DirectoryError (or let LDAPException through) and are
never caught per row: they abort the run.
"""

logger = logging.getLogger(__name__)

RESULT_SUCCESS = 0
RESULT_NO_SUCH_OBJECT = 32


class DirectoryError(Exception):
    """Raised when the directory answers a search with an error result."""


@dataclass(frozen=True)
class DirectoryEntry:
    dn: str
    attributes: dict[str, Any] = field(default_factory=dict)  # requested name -> value

    def get(self, attribute: str) -> Any:
        return self.attributes.get(attribute)


class DirectoryClient(Protocol):
    def find_one(self, query: DirectoryQuery, attributes: Sequence[str]) -> DirectoryEntry | None: ...

    def get_display_name(self, dn: str) -> str | None: ...


def normalize_value(value: Any) -> Any:
    """Convert an ldap3 attribute value into something a worksheet cell accepts."""
    if isinstance(value, (list, tuple)):
        values = [normalize_value(v) for v in value]
        values = [v for v in values if v is not None and v != ""]
        if not values:
            return None
        if len(values) == 1:
            return values[0]
        return ", ".join(str(v) for v in values)
    if isinstance(value, (bytes, bytearray)):
        return value.hex() if value else None
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    if value == "":
        return None
    return value


class LdapDirectoryClient:
    """DirectoryClient on top of an (already bound) ldap3 Connection."""

    def __init__(self, connection: Connection, base_dn: str, object_class: str | None = "user") -> None:
        self.connection = connection
        self.base_dn = base_dn
        self.object_class = object_class

    def _search(self, base: str, search_filter: str, scope: Any, attributes: Sequence[str]) -> list[dict[str, Any]]:
        logger.debug(f"ldap search base={base} filter={search_filter}")
        self.connection.search(base, search_filter, search_scope=scope, attributes=list(attributes))
        result = self.connection.result or {}
        code = result.get("result", RESULT_SUCCESS)
        if code == RESULT_NO_SUCH_OBJECT:
            return []
        if code != RESULT_SUCCESS:
            raise DirectoryError(
                f"search failed filter={search_filter}: {result.get('description')} {result.get('message', '')}".strip()
            )
        return [r for r in (self.connection.response or []) if r.get("type") == "searchResEntry"]

    def find_one(self, query: DirectoryQuery, attributes: Sequence[str]) -> DirectoryEntry | None:
        search_filter = query.to_ldap_filter()
        entries = self._search(self.base_dn, search_filter, SUBTREE, attributes)
        if not entries:
            return None
        if len(entries) > 1:
            logger.warning(f"{len(entries)} entries match '{query.describe()}', using the first: {entries[0].get('dn')}")
        return _to_entry(entries[0], attributes)

    def get_display_name(self, dn: str) -> str | None:
        entries = self._search(dn, "(objectClass=*)", BASE, ["displayName"])
        if not entries:
            return None
        return _to_entry(entries[0], ["displayName"]).get("displayName")

    def close(self) -> None:
        try:
            self.connection.unbind()
        except LDAPException as e:  # pragma: no cover
            logger.debug(f"ldap unbind failed: {e}")


def _to_entry(response: dict[str, Any], attributes: Sequence[str]) -> DirectoryEntry:
    raw = response.get("attributes") or {}
    by_lower = {str(k).lower(): v for k, v in raw.items()}
    values = {a: normalize_value(by_lower.get(a.lower())) for a in attributes}
    return DirectoryEntry(dn=response.get("dn", ""), attributes=values)


def connect(cfg: DirectoryConfig) -> LdapDirectoryClient:
    """Open and bind a read-only ldap3 connection.

    LDAP_USER / LDAP_PASSWORD from the environment (.env loaded by the CLI)
    take precedence over the config values.
    """
    user = os.getenv("LDAP_USER") or cfg.user
    password = os.getenv("LDAP_PASSWORD") or cfg.password
    server = Server(cfg.server, port=cfg.port, use_ssl=cfg.use_ssl)
    authentication = NTLM if cfg.authentication == "NTLM" else SIMPLE
    conn = Connection(
        server,
        user=user,
        password=password,
        authentication=authentication,
        read_only=True,
        auto_bind=True,
    )
    logger.debug(f"ldap bound server={cfg.server} user={user}")
    return LdapDirectoryClient(conn, cfg.base_dn, cfg.object_class)


@contextmanager
def directory_session(cfg: DirectoryConfig) -> Iterator[LdapDirectoryClient]:
    """Context manager providing a bound client; always unbinds on exit."""
    client = connect(cfg)
    try:
        yield client
    finally:
        client.close()
