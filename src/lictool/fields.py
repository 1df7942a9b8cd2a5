"""
lictool.fields - Field Mapping Construction
===========================================

Builds the ``field -> value`` mapping handed to the resolver from command
line options, configured defaults and the user's git identity.

Precedence, highest first:

1. explicit values (command line options or prompt answers)
2. ``[defaults]`` from the config file
3. git ``user.name`` / ``user.email``
4. the current year, for ``year``
"""

from __future__ import annotations

import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime

from lictool.placeholders import normalize_mapping


@dataclass(frozen=True)
class GitIdentity:
    """Name and email from git config; empty strings when unavailable."""

    name: str = ""
    email: str = ""


def read_git_config(key: str) -> str:
    """Return ``git config --get <key>`` or ``""`` if git or the key is missing."""
    try:
        result = subprocess.run(
            ["git", "config", "--get", key],
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError:
        return ""  # git not installed
    if result.returncode != 0:
        return ""
    return result.stdout.strip()


def git_identity() -> GitIdentity:
    return GitIdentity(
        name=read_git_config("user.name"),
        email=read_git_config("user.email"),
    )


def current_year() -> int:
    return datetime.now(UTC).year


def field_suggestions(
    defaults: Mapping[str, str] | None = None,
    identity: GitIdentity | None = None,
) -> dict[str, str]:
    """
    Best-guess value for each well-known field.

    Used as prompt defaults in ``lictool init`` and as fallbacks in
    ``lictool add``. Fields with no sensible guess are omitted.
    """
    identity = identity if identity is not None else git_identity()
    suggestions = {
        "year": str(current_year()),
        "author": identity.name,
        "email": identity.email,
    }
    suggestions.update(normalize_mapping(defaults or {}))
    return {k: v for k, v in suggestions.items() if v}


def build_field_mapping(
    *,
    author: str | None = None,
    year: int | str | None = None,
    program: str | None = None,
    email: str | None = None,
    extra: Mapping[str, str] | None = None,
    suggestions: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """
    Merge explicit values over suggestions.

    Parameters
    ----------
    author, year, program, email : optional
        Explicit values; ``None`` means "not given".
    extra : Mapping[str, str] | None
        Additional explicit values for custom ``{{name}}`` placeholders.
    suggestions : Mapping[str, str] | None
        Fallback values, typically from :func:`field_suggestions`.

    Returns
    -------
    dict[str, str]
        Canonical field names mapped to values.

    Examples
    --------
    >>> build_field_mapping(author="Jane Doe", year=2024)
    {'author': 'Jane Doe', 'year': '2024'}
    """
    mapping = dict(normalize_mapping(suggestions or {}))
    explicit = {
        "author": author,
        "year": str(year) if year is not None else None,
        "program": program,
        "email": email,
    }
    mapping.update(normalize_mapping(extra or {}))
    mapping.update(normalize_mapping(explicit))
    return mapping
