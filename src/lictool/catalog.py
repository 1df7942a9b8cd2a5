"""
lictool.catalog - License Catalog Source
========================================

Fetches the SPDX license list and individual license texts, backed by a
:class:`~lictool.cache.CacheStore`.

Fallback Order
--------------
Every lookup (the license list or one license text) goes through
:meth:`CatalogSource.fetch_with_fallback`:

    1. process memo        same answer for the rest of this invocation
    2. fresh cache         record younger than the TTL, no network
    3. network             one request, bounded by ``timeout``
    4. stale cache         any cached record, however old
    5. NetworkError        nothing usable anywhere

A successful network response is written back to the cache. There are no
retries: a timeout is just another network failure. Once the server has
been unreachable, later lookups in the same process skip step 3.

``offline`` skips step 3 entirely; ``refresh`` skips step 2 but still falls
back to step 4.

Endpoints
---------
Relative to ``base_url`` (default ``https://spdx.org``)::

    GET /licenses/licenses.json      license list
    GET /licenses/<identifier>.json  details, including ``licenseText``

Any HTTP server answering these two requests with the SPDX JSON shapes works.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar

import requests
from pydantic import ValidationError

from lictool import __version__
from lictool.cache import CacheStore, is_fresh
from lictool.errors import CacheCorruptError, NetworkError, NotFoundError
from lictool.models import CatalogIndex, LicenseSummary, LicenseTemplate


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://spdx.org"
DEFAULT_TIMEOUT = 10.0
DEFAULT_TTL = timedelta(days=7)

_Record = TypeVar("_Record", CatalogIndex, LicenseTemplate)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CatalogSource:
    """
    Cached access to the SPDX license catalog.

    Parameters
    ----------
    store : CacheStore
        Where records are persisted between runs.
    base_url : str
        Root of the license list server.
    session : requests.Session | None
        HTTP session. A new one is created when omitted.
    timeout : float
        Seconds to wait for the server before giving up.
    ttl : timedelta
        Age after which a cached record is refreshed.
    offline : bool
        Never touch the network.
    refresh : bool
        Ignore the TTL and always try the network first.
    clock : Callable[[], datetime] | None
        Returns the current UTC time. Injected by tests.

    Examples
    --------
    >>> from lictool.cache import MemoryCacheStore
    >>> catalog = CatalogSource(MemoryCacheStore())
    >>> template = catalog.fetch("MIT")  # doctest: +SKIP
    >>> template.required_fields  # doctest: +SKIP
    ('year', 'author')
    """

    def __init__(
        self,
        store: CacheStore,
        *,
        base_url: str = DEFAULT_BASE_URL,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        ttl: timedelta = DEFAULT_TTL,
        offline: bool = False,
        refresh: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", f"lictool/{__version__}")
        self.timeout = timeout
        self.ttl = ttl
        self.offline = offline
        self.refresh = refresh
        self.clock = clock or _utcnow
        self._index: CatalogIndex | None = None
        self._templates: dict[str, LicenseTemplate] = {}
        self._unreachable: NetworkError | None = None

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def fetch(self, identifier: str) -> LicenseTemplate:
        """
        Return the template for a canonical identifier.

        Raises
        ------
        NotFoundError
            If the server does not know the identifier.
        NetworkError
            If the server is unreachable and nothing is cached.
        """
        if identifier not in self._templates:
            self._templates[identifier] = self.fetch_with_fallback(
                identifier,
                load=lambda: self.store.load_template(identifier),
                download=lambda: self._download_template(identifier),
                save=self.store.save_template,
            )
        return self._templates[identifier]

    def index(self) -> CatalogIndex:
        """Return the license list with its metadata."""
        if self._index is None:
            self._index = self.fetch_with_fallback(
                "license list",
                load=self.store.load_index,
                download=self._download_index,
                save=self.store.save_index,
            )
        return self._index

    def cached_identifiers(self) -> list[str]:
        """Identifiers whose template is in the persisted cache."""
        return self.store.identifiers()

    def fetch_with_fallback(
        self,
        label: str,
        *,
        load: Callable[[], _Record | None],
        download: Callable[[], _Record],
        save: Callable[[_Record], None],
    ) -> _Record:
        """
        Resolve one record: fresh cache, network, stale cache, error.

        Parameters
        ----------
        label : str
            What is being fetched, for log messages.
        load : Callable
            Reads the cached record; may raise ``CacheCorruptError``.
        download : Callable
            Performs the single network attempt.
        save : Callable
            Persists a freshly downloaded record.
        """
        cached = self._load_cached(label, load)

        if cached is not None and not self.refresh:
            if is_fresh(cached.fetched_at, self.ttl, self.clock()):
                logger.debug("Using cached %s", label)
                return cached

        if self.offline:
            if cached is not None:
                logger.info("Offline: using cached %s from %s", label, cached.fetched_at)
                return cached
            raise NetworkError(f"The {label} is not cached and offline mode is on.")

        if self._unreachable is not None:
            # at most one connection failure per process
            if cached is not None:
                logger.debug("Server unreachable: using cached %s", label)
                return cached
            raise NetworkError(
                f"The {label} is not cached and the server is unreachable "
                f"({self._unreachable})"
            ) from self._unreachable

        try:
            record = download()
        except NetworkError as e:
            if cached is None:
                raise
            logger.warning(
                "Could not refresh %s (%s); using cached copy from %s",
                label, e, cached.fetched_at.date(),
            )
            return cached

        try:
            save(record)
        except OSError as e:
            logger.warning("Could not write %s to the cache: %s", label, e)
        return record

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _load_cached(
        self,
        label: str,
        load: Callable[[], _Record | None],
    ) -> _Record | None:
        try:
            return load()
        except CacheCorruptError as e:
            logger.warning("Ignoring cached %s: %s", label, e)
            return None

    def _get_json(self, url: str) -> Any | None:
        """GET ``url`` and decode JSON. ``None`` means HTTP 404."""
        logger.debug("GET %s", url)
        try:
            response = self.session.get(
                url,
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
        except requests.exceptions.Timeout as e:
            self._unreachable = NetworkError(f"Timed out after {self.timeout:g}s fetching {url}")
            raise self._unreachable from e
        except requests.exceptions.RequestException as e:
            self._unreachable = NetworkError(f"Could not fetch {url}: {e}")
            raise self._unreachable from e

        if response.status_code == 404:
            return None
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise NetworkError(f"Server error fetching {url}: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"Malformed JSON from {url}") from e

    def _download_index(self) -> CatalogIndex:
        url = f"{self.base_url}/licenses/licenses.json"
        data = self._get_json(url)
        if data is None:
            raise NetworkError(f"License list not found at {url}")
        try:
            licenses = tuple(LicenseSummary.from_spdx(item) for item in data["licenses"])
        except (KeyError, TypeError, ValidationError) as e:
            raise NetworkError(f"Unexpected license list format from {url}") from e
        return CatalogIndex(
            licenses=licenses,
            fetched_at=self.clock(),
            license_list_version=data.get("licenseListVersion"),
        )

    def _download_template(self, identifier: str) -> LicenseTemplate:
        url = f"{self.base_url}/licenses/{identifier}.json"
        data = self._get_json(url)
        if data is None:
            raise NotFoundError(identifier)
        try:
            return LicenseTemplate.from_spdx(data, fetched_at=self.clock())
        except (KeyError, TypeError, ValidationError) as e:
            raise NetworkError(f"Unexpected license details format from {url}") from e

    def list(self) -> list[LicenseSummary]:
        """
        Return every known license as ``(identifier, display name, flags)``.

        Raises
        ------
        NetworkError
            If the list is neither reachable nor cached.
        """
        return [*self.index().licenses]


# =============================================================================
# Filtering
# =============================================================================


def filter_licenses(
    licenses: Iterable[LicenseSummary],
    *,
    deprecated: bool = False,
    supported: bool = False,
    osi_approved: bool = False,
    fsf_libre: bool = False,
) -> list[LicenseSummary]:
    """
    Filter the license list by catalog flags.

    Each flag that is set must hold; unset flags impose nothing. The result
    lists supported identifiers before deprecated ones and otherwise keeps
    catalog order.
    """
    selected = [
        lic for lic in licenses
        if (not deprecated or lic.is_deprecated)
        and (not supported or not lic.is_deprecated)
        and (not osi_approved or lic.is_osi_approved)
        and (not fsf_libre or lic.is_fsf_libre is True)
    ]
    return sorted(selected, key=lambda lic: lic.is_deprecated)
