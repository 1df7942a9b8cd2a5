"""
pytest configuration and shared fixtures for lictool tests.

Fixtures defined here are automatically available to all test modules.

Fixtures
--------
now : datetime
    Fixed "current time" used as the catalog clock.
spdx_session : FakeSession
    HTTP session serving a small SPDX catalog (MIT, Apache-2.0,
    GPL-3.0-only, GPL-2.0, 0BSD, X-Custom).
memory_store / file_store : CacheStore
    Empty cache stores.
catalog / resolver
    A CatalogSource / LicenseResolver wired to the fakes above.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
import requests

from lictool.cache import FileCacheStore, MemoryCacheStore
from lictool.catalog import CatalogSource
from lictool.log import LOGGER_NAME
from lictool.models import LicenseTemplate
from lictool.resolver import LicenseResolver


BASE_URL = "https://spdx.test"

MIT_TEXT = (
    "MIT License\n"
    "\n"
    "Copyright (c) <year> <copyright holders>\n"
    "\n"
    "Permission is hereby granted, free of charge, to any person obtaining a copy\n"
    "of this software and associated documentation files (the \"Software\"), to deal\n"
    "in the Software without restriction.\n"
    "\n"
    "THE SOFTWARE IS PROVIDED \"AS IS\", WITHOUT WARRANTY OF ANY KIND.\n"
)

APACHE_TEXT = (
    "Apache License\n"
    "Version 2.0, January 2004\n"
    "\n"
    "Copyright [yyyy] [name of copyright owner]\n"
    "\n"
    "Licensed under the Apache License, Version 2.0 (the \"License\");\n"
    "you may not use this file except in compliance with the License.\n"
)

GPL3_TEXT = (
    "GNU GENERAL PUBLIC LICENSE\n"
    "Version 3, 29 June 2007\n"
    "\n"
    "<one line to give the program's name and a brief idea of what it does.>\n"
    "Copyright (C) <year> <name of author>\n"
    "\n"
    "<program> Copyright (C) <year> <name of author>\n"
    "This program comes with ABSOLUTELY NO WARRANTY.\n"
)

ZERO_BSD_TEXT = (
    "Copyright (C) 2006 by Rob Landley <rob@landley.net>\n"
    "\n"
    "Permission to use, copy, modify, and/or distribute this software for any\n"
    "purpose with or without fee is hereby granted.\n"
)

CUSTOM_TEXT = (
    "Custom License\n"
    "\n"
    "Copyright {{year}} {{ author }} <[EMAIL]>\n"
    "Project: {{project_url}}\n"
)


def _details(
    identifier: str,
    name: str,
    text: str,
    *,
    deprecated: bool = False,
    osi: bool = True,
    fsf: bool | None = None,
    **extra: Any,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "isDeprecatedLicenseId": deprecated,
        "licenseText": text,
        "name": name,
        "licenseId": identifier,
        "seeAlso": [f"https://example.org/{identifier}"],
        "isOsiApproved": osi,
    }
    if fsf is not None:
        data["isFsfLibre"] = fsf
    data.update(extra)
    return data


DETAILS: dict[str, dict[str, Any]] = {
    "MIT": _details("MIT", "MIT License", MIT_TEXT, fsf=True),
    "Apache-2.0": _details("Apache-2.0", "Apache License 2.0", APACHE_TEXT, fsf=True),
    "GPL-3.0-only": _details(
        "GPL-3.0-only", "GNU General Public License v3.0 only", GPL3_TEXT, fsf=True,
    ),
    "GPL-2.0": _details(
        "GPL-2.0", "GNU General Public License v2.0 only", GPL3_TEXT,
        deprecated=True, deprecatedVersion="3.0",
    ),
    "0BSD": _details("0BSD", "BSD Zero Clause License", ZERO_BSD_TEXT),
    "X-Custom": _details("X-Custom", "Custom License", CUSTOM_TEXT, osi=False),
}


def licenses_document() -> dict[str, Any]:
    """The SPDX licenses.json equivalent of DETAILS."""
    licenses = []
    for identifier, data in DETAILS.items():
        entry = {
            "reference": f"https://spdx.org/licenses/{identifier}.html",
            "isDeprecatedLicenseId": data["isDeprecatedLicenseId"],
            "detailsUrl": f"{BASE_URL}/licenses/{identifier}.json",
            "name": data["name"],
            "licenseId": identifier,
            "isOsiApproved": data["isOsiApproved"],
        }
        if "isFsfLibre" in data:
            entry["isFsfLibre"] = data["isFsfLibre"]
        licenses.append(entry)
    return {"licenseListVersion": "3.24", "licenses": licenses}


# =============================================================================
# HTTP Fakes
# =============================================================================

class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int, payload: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self._text = text

    def json(self) -> Any:
        if self._text is not None:
            raise requests.exceptions.JSONDecodeError("Expecting value", self._text, 0)
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """
    Serves canned responses keyed by URL and records every request.

    Unknown URLs answer 404. Setting ``error`` makes every request raise it,
    which simulates a network outage.
    """

    def __init__(self, routes: dict[str, FakeResponse] | None = None) -> None:
        self.routes = dict(routes or {})
        self.headers: dict[str, str] = {}
        self.calls: list[dict[str, Any]] = []
        self.error: Exception | None = None

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.routes.get(url, FakeResponse(404))

    @property
    def urls(self) -> list[str]:
        return [call["url"] for call in self.calls]


def spdx_routes() -> dict[str, FakeResponse]:
    routes = {f"{BASE_URL}/licenses/licenses.json": FakeResponse(200, licenses_document())}
    for identifier, data in DETAILS.items():
        routes[f"{BASE_URL}/licenses/{identifier}.json"] = FakeResponse(200, data)
    return routes


def make_template(
    identifier: str = "MIT",
    fetched_at: datetime | None = None,
) -> LicenseTemplate:
    """Build a LicenseTemplate straight from the DETAILS table."""
    return LicenseTemplate.from_spdx(
        DETAILS[identifier],
        fetched_at=fetched_at or datetime(2024, 1, 1, tzinfo=UTC),
    )


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Undo configure_logging so caplog sees records in every test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def now() -> datetime:
    """Fixed current time for TTL calculations."""
    return datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def spdx_session() -> FakeSession:
    """HTTP session serving the test catalog."""
    return FakeSession(spdx_routes())


@pytest.fixture
def memory_store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def file_store(tmp_path: Path) -> FileCacheStore:
    """
    On-disk cache in a temporary directory.

    The directory is automatically cleaned up after the test completes.
    """
    return FileCacheStore(tmp_path / "cache")


@pytest.fixture
def catalog(
    memory_store: MemoryCacheStore,
    spdx_session: FakeSession,
    now: datetime,
) -> CatalogSource:
    return CatalogSource(
        memory_store,
        base_url=BASE_URL,
        session=spdx_session,  # type: ignore[arg-type]
        clock=lambda: now,
    )


@pytest.fixture
def resolver(catalog: CatalogSource) -> LicenseResolver:
    return LicenseResolver(catalog)


# =============================================================================
# pytest Configuration
# =============================================================================

def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the test suite."""
    config.addinivalue_line(
        "markers", "integration: marks tests requiring external resources"
    )
