"""
lictool.errors - Exception Hierarchy
====================================

Every failure the resolution engine can report is a subclass of
:class:`LictoolError`. The engine raises these; the CLI catches them at the
command boundary, prints them with rich and exits with status 1.

Error Kinds
-----------
NotFoundError
    The identifier is unknown to the catalog.
NetworkError
    The catalog could not be reached and no usable cache existed.
MissingFieldsError
    One or more required placeholders have no value. Carries the complete
    list so the caller can prompt once for everything.
CacheCorruptError
    A persisted cache record is unreadable. The catalog treats this as a
    cache miss; it never reaches the CLI during normal resolution.
LicenseFileExistsError
    The output file already exists and overwriting was not requested.
ConfigError
    The user configuration file is invalid.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class LictoolError(Exception):
    """Base class for all lictool errors."""


class NotFoundError(LictoolError):
    """No license in the catalog matches the requested identifier."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"No license found matching the ID '{identifier}'.")


class NetworkError(LictoolError):
    """The license catalog could not be fetched and nothing was cached."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MissingFieldsError(LictoolError):
    """
    Required placeholders were not supplied.

    Attributes
    ----------
    fields : list[str]
        Every missing field, in order of first appearance in the template.
    """

    def __init__(self, fields: Iterable[str]) -> None:
        self.fields = list(fields)
        super().__init__(
            "Missing value for required field(s): " + ", ".join(self.fields)
        )


class CacheCorruptError(LictoolError):
    """A persisted cache record could not be read or failed validation."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cache file {path} is corrupt: {reason}")


class LicenseFileExistsError(LictoolError, FileExistsError):
    """The target license file already exists."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"The {path} file already exists.")


class ConfigError(LictoolError):
    """The configuration file is malformed or a setting is invalid."""

    def __init__(self, path: Path | None, reason: str) -> None:
        self.path = path
        self.reason = reason
        where = f" in {path}" if path is not None else ""
        super().__init__(f"Invalid configuration{where}: {reason}")
