from __future__ import annotations

"""Canonical name helpers.

A canonical name looks like `contoso.com/EU/BEL/Users/Bob Lee`: the DNS domain,
the organizational units from the top down, and the object itself.
"""

OU_SEPARATOR = "\\"


def canonical_name_to_ou(canonical_name: str | None) -> str | None:
    """Organizational-unit label of an object (`EU\\BEL\\Users` for the above).

    Drops the domain and the object's own name. Returns None for an empty
    value and an empty string for objects directly below the domain root.
    """
    if canonical_name is None:
        return None
    text = str(canonical_name).strip()
    if not text:
        return None
    # Escaped slashes (`\/`) belong to a name, not to the path.
    parts = [p.replace("\0", "/") for p in text.replace("\\/", "\0").split("/")]
    if len(parts) < 2:
        raise ValueError(f"not a canonical name: {canonical_name!r}")
    return OU_SEPARATOR.join(parts[1:-1])
