"""
lictool - SPDX License Generator
================================

A CLI tool that adds a standard license to your project: pick an SPDX
identifier, fill in the author and year, and get the exact license text
written to ``LICENSE``.

Features
--------
- **Full SPDX catalog**: every identifier on https://spdx.org/licenses/
- **Works offline**: license texts are cached and reused when the network
  is unavailable
- **Interactive or scripted**: ``lictool init`` prompts, ``lictool add``
  takes everything as options
- **Exact output**: placeholders are substituted in a single pass; nothing
  else in the license text changes

Quick Start
-----------
```bash
# Pick a license interactively
lictool init

# Or directly
lictool add MIT --author "Jane Doe" --year 2024
```

Example
-------
>>> from lictool import LicenseResolver, CatalogSource, FileCacheStore
>>> from pathlib import Path
>>> resolver = LicenseResolver(CatalogSource(FileCacheStore(Path(".cache"))))
>>> resolver.resolve("mit", {"year": "2024", "author": "Jane Doe"}).text  # doctest: +SKIP
'MIT License\\n\\nCopyright (c) 2024 Jane Doe\\n...'

Architecture
------------
- ``placeholders``: Token syntax and field names
- ``models``: Pydantic records (templates, catalog index, cache format)
- ``renderer``: Single-pass placeholder substitution
- ``cache``: Persisted and in-memory cache stores
- ``catalog``: SPDX client with cache/network/stale fallback
- ``resolver``: Identifier lookup + rendering entry point
- ``fields``: Field mapping construction (git, config defaults)
- ``config``: TOML user configuration
- ``writer``: Writes the final LICENSE file
- ``cli``: Typer-based command line interface
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.5.0"
__license__ = "GPL-3.0-only"

# =============================================================================
# Public API Exports
# =============================================================================

from lictool.cache import FileCacheStore, MemoryCacheStore
from lictool.catalog import CatalogSource
from lictool.errors import (
    CacheCorruptError,
    LictoolError,
    MissingFieldsError,
    NetworkError,
    NotFoundError,
)
from lictool.models import LicenseSummary, LicenseTemplate, RenderedLicense
from lictool.resolver import LicenseResolver


__all__ = [
    "CacheCorruptError",
    "CatalogSource",
    "FileCacheStore",
    "LicenseResolver",
    "LicenseSummary",
    "LicenseTemplate",
    "LictoolError",
    "MemoryCacheStore",
    "MissingFieldsError",
    "NetworkError",
    "NotFoundError",
    "RenderedLicense",
    "__version__",
]
