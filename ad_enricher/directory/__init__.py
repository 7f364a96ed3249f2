"""Directory service access: typed queries, the client protocol and ldap3."""

from .client import DirectoryClient, DirectoryEntry, DirectoryError, LdapDirectoryClient, directory_session
from .names import canonical_name_to_ou
from .query import DirectoryQuery, EqualityClause

__all__ = [
    "DirectoryClient",
    "DirectoryEntry",
    "DirectoryError",
    "DirectoryQuery",
    "EqualityClause",
    "LdapDirectoryClient",
    "canonical_name_to_ou",
    "directory_session",
]
