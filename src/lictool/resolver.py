"""
lictool.resolver - License Resolution
=====================================

The resolver is the entry point the CLI uses. It runs a single pass::

    normalize identifier → fetch template → check fields → render

No step is retried and no error is translated: ``NotFoundError``,
``NetworkError`` and ``MissingFieldsError`` reach the caller exactly as the
catalog or renderer raised them.

Identifier Matching
-------------------
Users type ``mit`` or `` Apache-2.0 ``; SPDX says ``MIT`` and ``Apache-2.0``.
The requested identifier is stripped and compared case-insensitively with the
catalog's canonical identifiers. When the license list itself cannot be
obtained, the identifiers of templates already in the cache are used instead,
so a previously used license keeps working offline.

Usage
-----
>>> from lictool.cache import MemoryCacheStore
>>> from lictool.catalog import CatalogSource
>>> resolver = LicenseResolver(CatalogSource(MemoryCacheStore()))
>>> resolver.resolve("mit", {"year": "2024", "author": "Jane Doe"})  # doctest: +SKIP
RenderedLicense(identifier='MIT', text='MIT License\\n\\nCopyright (c) 2024 Jane Doe...')
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from lictool.catalog import CatalogSource
from lictool.errors import NetworkError, NotFoundError
from lictool.models import LicenseSummary, LicenseTemplate, RenderedLicense
from lictool.renderer import UnfilledPolicy, render


logger = logging.getLogger(__name__)


def normalize_identifier(identifier: str) -> str:
    """Key used for case-insensitive identifier comparison."""
    return identifier.strip().casefold()


def match_identifier(identifier: str, candidates: list[str]) -> str | None:
    """Return the canonical spelling of ``identifier`` among ``candidates``."""
    wanted = normalize_identifier(identifier)
    for candidate in candidates:
        if normalize_identifier(candidate) == wanted:
            return candidate
    return None


class LicenseResolver:
    """
    Turns ``(identifier, field mapping)`` into license text.

    Parameters
    ----------
    catalog : CatalogSource
        Source of license templates.
    defaults : Mapping[str, str] | None
        Field values used when the mapping lacks them (from configuration).
    unfilled : UnfilledPolicy | str
        How optional placeholders without a value are rendered.
    """

    def __init__(
        self,
        catalog: CatalogSource,
        *,
        defaults: Mapping[str, str] | None = None,
        unfilled: UnfilledPolicy | str = UnfilledPolicy.EMPTY,
    ) -> None:
        self.catalog = catalog
        self.defaults = dict(defaults or {})
        self.unfilled = UnfilledPolicy(unfilled)

    def canonical_identifier(self, identifier: str) -> str:
        """
        Map a user-supplied identifier to the catalog's spelling.

        Raises
        ------
        NotFoundError
            If no catalog identifier matches.
        NetworkError
            If the catalog is unavailable and the cache has no match.
        """
        try:
            known = [lic.identifier for lic in self.catalog.list()]
        except NetworkError:
            match = match_identifier(identifier, self.catalog.cached_identifiers())
            if match is None:
                raise
            logger.info("License list unavailable; matched cached template %s", match)
            return match

        match = match_identifier(identifier, known)
        if match is None:
            raise NotFoundError(identifier.strip())
        return match

    def lookup(self, identifier: str) -> LicenseTemplate:
        """Fetch the template for a user-supplied identifier."""
        return self.catalog.fetch(self.canonical_identifier(identifier))

    def resolve(self, identifier: str, fields: Mapping[str, str]) -> RenderedLicense:
        """
        Produce final license text.

        Parameters
        ----------
        identifier : str
            License identifier, any casing, surrounding whitespace allowed.
        fields : Mapping[str, str]
            Placeholder values.

        Returns
        -------
        RenderedLicense
            Canonical identifier and rendered text.

        Raises
        ------
        NotFoundError
            Unknown identifier.
        NetworkError
            Catalog unreachable and nothing cached.
        MissingFieldsError
            Required fields absent; lists all of them.
        """
        template = self.lookup(identifier)
        return render(
            template,
            fields,
            defaults=self.defaults,
            unfilled=self.unfilled,
        )

    def list(self) -> list[LicenseSummary]:
        """All licenses known to the catalog."""
        return self.catalog.list()
