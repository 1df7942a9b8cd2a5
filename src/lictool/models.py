"""
lictool.models - Pydantic Models for the License Catalog
========================================================

This module defines the records that flow through lictool. Pydantic gives us
three things here:

1. **Validation**: cache files written by another (possibly older or newer)
   lictool run are validated before use; anything malformed is reported as
   cache corruption instead of crashing later.
2. **Serialization**: one ``model_dump_json(by_alias=True)`` call produces the
   on-disk cache record.
3. **Forward compatibility**: ``extra="ignore"`` drops keys a future version
   might add, so old readers keep working.

Architecture Notes
------------------
    CatalogIndex
    └── LicenseSummary*       one row per SPDX identifier

    LicenseTemplate           full license text + metadata for one identifier
    RenderedLicense           final text produced by the renderer

Identifiers are plain strings, never an enum: new SPDX licenses appear
upstream all the time and must work without a new lictool release.

Cache Record Format
-------------------
Records are stored as JSON with camelCase keys::

    {
      "identifier": "MIT",
      "displayName": "MIT License",
      "body": "MIT License\\n\\nCopyright (c) <year> <copyright holders>...",
      "requiredFields": ["year", "author"],
      "fetchedAt": "2024-05-01T10:00:00Z",
      "seeAlso": ["https://opensource.org/license/mit/"],
      ...
    }
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from lictool.placeholders import required_fields


class _Record(BaseModel):
    """Shared configuration: immutable, camelCase on disk, unknown keys ignored."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# Catalog Listing
# =============================================================================


class LicenseSummary(_Record):
    """
    One entry of the license list.

    Attributes
    ----------
    identifier : str
        Canonical SPDX identifier, e.g. ``"GPL-3.0-only"``.
    display_name : str
        Human readable name.
    is_deprecated : bool
        Whether SPDX marks the identifier as deprecated.
    is_osi_approved : bool
        Whether the license is OSI approved.
    is_fsf_libre : bool | None
        Whether the FSF lists it as free/libre. SPDX omits the key for most
        licenses, hence the ``None``.
    """

    identifier: str = Field(min_length=1)
    display_name: str = ""
    is_deprecated: bool = False
    is_osi_approved: bool = False
    is_fsf_libre: bool | None = None

    @classmethod
    def from_spdx(cls, data: dict[str, Any]) -> LicenseSummary:
        """Build a summary from one element of SPDX ``licenses.json``."""
        return cls(
            identifier=data["licenseId"],
            display_name=data.get("name", ""),
            is_deprecated=data.get("isDeprecatedLicenseId", False),
            is_osi_approved=data.get("isOsiApproved", False),
            is_fsf_libre=data.get("isFsfLibre"),
        )


class CatalogIndex(_Record):
    """The cached license list together with the time it was fetched."""

    licenses: tuple[LicenseSummary, ...] = ()
    fetched_at: AwareDatetime
    license_list_version: str | None = None

    def identifiers(self) -> list[str]:
        return [lic.identifier for lic in self.licenses]


# =============================================================================
# License Templates
# =============================================================================


class LicenseTemplate(_Record):
    """
    Raw license text plus metadata for a single identifier.

    A template is immutable once fetched. ``body`` is kept exactly as the
    upstream served it; placeholder substitution happens only at render time,
    which lets the ``keep`` policy reproduce the original marker text.

    Attributes
    ----------
    identifier : str
        Canonical SPDX identifier.
    display_name : str
        Human readable license name.
    body : str
        License text containing placeholder tokens.
    required_fields : tuple[str, ...]
        Required placeholders in order of first appearance in ``body``.
    fetched_at : datetime
        When the body was retrieved from the network (UTC). A timestamp
        without a timezone fails validation.
    see_also : tuple[str, ...]
        Reference URLs.
    comments : str | None
        SPDX license comments.
    is_deprecated, is_osi_approved, is_fsf_libre
        Catalog flags, as in :class:`LicenseSummary`.
    deprecated_version : str | None
        License list version that deprecated the identifier.
    """

    identifier: str = Field(min_length=1)
    display_name: str = ""
    body: str
    required_fields: tuple[str, ...] = ()
    fetched_at: AwareDatetime
    see_also: tuple[str, ...] = ()
    comments: str | None = None
    is_deprecated: bool = False
    is_osi_approved: bool = False
    is_fsf_libre: bool | None = None
    deprecated_version: str | None = None

    @classmethod
    def from_spdx(cls, data: dict[str, Any], fetched_at: datetime) -> LicenseTemplate:
        """
        Build a template from an SPDX ``<identifier>.json`` details document.

        Parameters
        ----------
        data : dict
            Parsed JSON document.
        fetched_at : datetime
            Retrieval timestamp to record.

        Raises
        ------
        KeyError
            If ``licenseId`` or ``licenseText`` is absent.
        """
        body = data["licenseText"]
        return cls(
            identifier=data["licenseId"],
            display_name=data.get("name", ""),
            body=body,
            required_fields=required_fields(body),
            fetched_at=fetched_at,
            see_also=tuple(data.get("seeAlso") or ()),
            comments=data.get("licenseComments"),
            is_deprecated=data.get("isDeprecatedLicenseId", False),
            is_osi_approved=data.get("isOsiApproved", False),
            is_fsf_libre=data.get("isFsfLibre"),
            deprecated_version=data.get("deprecatedVersion"),
        )

    @property
    def reference_url(self) -> str:
        return f"https://spdx.org/licenses/{self.identifier}.html"


class RenderedLicense(_Record):
    """Final license text ready to be written to disk."""

    identifier: str
    text: str
