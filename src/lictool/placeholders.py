"""
lictool.placeholders - Placeholder Token Syntax
===============================================

License bodies mark the spots that receive project-specific values with
placeholder tokens. lictool recognises two spellings:

Canonical form
    ``{{name}}`` - double braces around a field name. Whitespace inside the
    braces is allowed and the name is matched case-insensitively, so
    ``{{ Year }}`` and ``{{year}}`` are the same token.

SPDX markers
    The upstream SPDX texts use a zoo of legacy markers such as ``<year>``,
    ``[yyyy]`` or ``<copyright holders>``. Each one is an alias of a canonical
    field (see :data:`MARKER_FIELDS`).

Both spellings are matched by the single compiled :data:`TOKEN_PATTERN`; it is
the only scanner in the code base, shared by field discovery and rendering.

Fields
------
year
    Year of creation. Required.
author
    Copyright holder. Required.
program
    Program name / one-line description. Optional.
email
    Contact email. Optional.

Any other canonical token name is accepted as an optional field.
"""

from __future__ import annotations

import re
from collections.abc import Mapping


# =============================================================================
# Field Names
# =============================================================================

REQUIRED_FIELDS: tuple[str, ...] = ("year", "author")
OPTIONAL_FIELDS: tuple[str, ...] = ("program", "email")

# Alternative spellings accepted as mapping keys and inside {{...}} tokens
FIELD_ALIASES: dict[str, str] = {
    "fullname": "author",
    "owner": "author",
    "name": "author",
    "holder": "author",
    "copyright_holder": "author",
    "yyyy": "year",
    "repo": "program",
    "project": "program",
}

# Legacy markers found in the SPDX license texts
MARKER_FIELDS: dict[str, str] = {
    "[yyyy]": "year",
    "[YEAR]": "year",
    "<year>": "year",
    "{YEAR}": "year",
    "[Year]": "year",
    "[fullname]": "author",
    "<owner>": "author",
    "[NAME]": "author",
    "<name of author>": "author",
    "[name of copyright owner]": "author",
    "[name of copyright holder]": "author",
    "<COPYRIGHT HOLDERS>": "author",
    "<copyright holders>": "author",
    "<AUTHOR>": "author",
    "<author's name or designee>": "author",
    (
        "[one or more legally recognised persons or entities offering the Work "
        "under the terms and conditions of this Licence]"
    ): "author",
    "<program>": "program",
    "<one line to give the program's name and a brief idea of what it does.>": "program",
    "<EMAIL>": "email",
    "[EMAIL]": "email",
}

# Canonical tokens come first so "{{YEAR}}" is never read as "{" + "{YEAR}" + "}".
# Markers are tried longest first so no marker shadows a longer one.
TOKEN_PATTERN = re.compile(
    r"\{\{\s*(?P<name>[A-Za-z_][A-Za-z0-9_-]*)\s*\}\}"
    r"|(?P<marker>"
    + "|".join(re.escape(m) for m in sorted(MARKER_FIELDS, key=len, reverse=True))
    + ")"
)


# =============================================================================
# Helpers
# =============================================================================


def canonical_field(name: str) -> str:
    """
    Fold a field name to its canonical spelling.

    Examples
    --------
    >>> canonical_field("Fullname")
    'author'
    >>> canonical_field("project-url")
    'project_url'
    """
    key = name.strip().lower().replace("-", "_")
    return FIELD_ALIASES.get(key, key)


def field_for_match(match: re.Match[str]) -> str:
    """Return the canonical field a :data:`TOKEN_PATTERN` match stands for."""
    name = match.group("name")
    if name is not None:
        return canonical_field(name)
    return MARKER_FIELDS[match.group("marker")]


def scan_fields(body: str) -> list[str]:
    """
    List the fields a body uses, in order of first appearance.

    Parameters
    ----------
    body : str
        Raw license text.

    Returns
    -------
    list[str]
        Canonical field names without duplicates.
    """
    seen: dict[str, None] = {}
    for match in TOKEN_PATTERN.finditer(body):
        seen.setdefault(field_for_match(match), None)
    return list(seen)


def required_fields(body: str) -> tuple[str, ...]:
    """Fields from :data:`REQUIRED_FIELDS` used by ``body``, in body order."""
    return tuple(f for f in scan_fields(body) if f in REQUIRED_FIELDS)


def has_placeholders(text: str) -> bool:
    """Whether ``text`` still contains any recognised token."""
    return TOKEN_PATTERN.search(text) is not None


def normalize_mapping(fields: Mapping[str, str | None]) -> dict[str, str]:
    """
    Fold a field mapping onto canonical keys.

    ``None`` values are dropped. When an alias and its canonical key are both
    present, the canonical key wins.
    """
    normalized: dict[str, str] = {}
    explicit: set[str] = set()
    for key, value in fields.items():
        if value is None:
            continue
        canonical = canonical_field(key)
        is_canonical = key.strip().lower().replace("-", "_") == canonical
        if canonical in explicit and not is_canonical:
            continue
        normalized[canonical] = value
        if is_canonical:
            explicit.add(canonical)
    return normalized
