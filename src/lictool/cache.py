"""
lictool.cache - Persisted License Cache
=======================================

The cache is the only state shared between lictool invocations, and several
invocations may run at the same time. Two rules keep it safe:

1. **Atomic replace**: every record is written to a temporary file in the
   target directory and then renamed over the target. A reader sees either
   the old record or the new one, never a partial write. A crash mid-write
   leaves a stray temp file and an intact cache.
2. **Corruption is a miss**: anything that fails to parse or validate is
   reported as :class:`~lictool.errors.CacheCorruptError`, which the catalog
   treats like an empty cache.

Layout
------
::

    <cache_dir>/
    ├── index.json            license list (CatalogIndex)
    └── templates/
        ├── MIT.json          one LicenseTemplate per identifier
        └── Apache-2.0.json

Stores
------
FileCacheStore
    The on-disk cache described above.
MemoryCacheStore
    Dict-backed store with the same interface, used for ``--no-cache`` runs
    and in tests.
"""

from __future__ import annotations

import logging
import os
import re
import stat
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from lictool.errors import CacheCorruptError
from lictool.models import CatalogIndex, LicenseTemplate


logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.json"
TEMPLATES_DIRNAME = "templates"


class CacheStore(Protocol):
    """Interface shared by all cache stores."""

    def load_template(self, identifier: str) -> LicenseTemplate | None: ...

    def save_template(self, template: LicenseTemplate) -> None: ...

    def load_index(self) -> CatalogIndex | None: ...

    def save_index(self, index: CatalogIndex) -> None: ...

    def identifiers(self) -> list[str]: ...

    def clear(self) -> int: ...


def is_fresh(fetched_at: datetime, ttl: timedelta, now: datetime) -> bool:
    """Whether a record fetched at ``fetched_at`` is still within ``ttl``."""
    return now - fetched_at <= ttl


def atomic_write_text(target: Path, content: str) -> None:
    """
    Write ``content`` to ``target`` atomically.

    The temp file lives in the target's directory so the final rename stays
    on one filesystem. An existing target keeps its permission bits. On any
    failure the temp file is removed and the exception re-raised; ``target``
    is untouched.

    Raises
    ------
    OSError
        If the write or the rename fails.
    """
    target.parent.mkdir(parents=True, exist_ok=True)

    handle = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=target.parent,
        prefix=".lictool_",
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(handle.name)

    try:
        handle.write(content)
        handle.flush()
        os.fsync(handle.fileno())
        handle.close()
        if target.exists():
            temp_path.chmod(stat.S_IMODE(target.stat().st_mode))
        temp_path.replace(target)
    except BaseException:
        handle.close()
        temp_path.unlink(missing_ok=True)
        raise


def _safe_filename(identifier: str) -> str:
    # SPDX ids are [A-Za-z0-9.+-]; anything else must not escape the directory
    return re.sub(r"[^A-Za-z0-9.+-]", "_", identifier) + ".json"


# =============================================================================
# File Store
# =============================================================================


class FileCacheStore:
    """
    JSON cache on disk.

    Parameters
    ----------
    root : Path
        Cache directory. Created on first write.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    @property
    def index_path(self) -> Path:
        return self.root / INDEX_FILENAME

    @property
    def templates_dir(self) -> Path:
        return self.root / TEMPLATES_DIRNAME

    def template_path(self, identifier: str) -> Path:
        return self.templates_dir / _safe_filename(identifier)

    def _read(self, path: Path) -> str | None:
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CacheCorruptError(path, str(e)) from e

    def load_template(self, identifier: str) -> LicenseTemplate | None:
        """
        Read the cached template for ``identifier``.

        Returns ``None`` when nothing is cached.

        Raises
        ------
        CacheCorruptError
            If the record is unreadable, invalid, or belongs to another id.
        """
        path = self.template_path(identifier)
        raw = self._read(path)
        if raw is None:
            return None
        try:
            template = LicenseTemplate.model_validate_json(raw)
        except ValidationError as e:
            raise CacheCorruptError(path, f"{e.error_count()} validation error(s)") from e
        if template.identifier != identifier:
            raise CacheCorruptError(
                path, f"record is for '{template.identifier}', expected '{identifier}'"
            )
        return template

    def save_template(self, template: LicenseTemplate) -> None:
        path = self.template_path(template.identifier)
        atomic_write_text(path, template.model_dump_json(by_alias=True, indent=2))
        logger.debug("Cached %s at %s", template.identifier, path)

    def load_index(self) -> CatalogIndex | None:
        """Read the cached license list, ``None`` if absent."""
        raw = self._read(self.index_path)
        if raw is None:
            return None
        try:
            return CatalogIndex.model_validate_json(raw)
        except ValidationError as e:
            raise CacheCorruptError(
                self.index_path, f"{e.error_count()} validation error(s)"
            ) from e

    def save_index(self, index: CatalogIndex) -> None:
        atomic_write_text(self.index_path, index.model_dump_json(by_alias=True, indent=2))
        logger.debug("Cached license list (%d entries)", len(index.licenses))

    def identifiers(self) -> list[str]:
        """Identifiers with a cached template, sorted."""
        if not self.templates_dir.is_dir():
            return []
        return sorted(p.stem for p in self.templates_dir.glob("*.json"))

    def clear(self) -> int:
        """
        Delete every cache record.

        Returns
        -------
        int
            Number of files removed.
        """
        removed = 0
        candidates = [self.index_path]
        if self.templates_dir.is_dir():
            candidates.extend(self.templates_dir.glob("*.json"))
        for path in candidates:
            if path.exists():
                path.unlink()
                removed += 1
        return removed


# =============================================================================
# In-Memory Store
# =============================================================================


class MemoryCacheStore:
    """Cache store that lives only as long as the process."""

    def __init__(
        self,
        templates: dict[str, LicenseTemplate] | None = None,
        index: CatalogIndex | None = None,
    ) -> None:
        self.templates: dict[str, LicenseTemplate] = dict(templates or {})
        self.index = index

    def load_template(self, identifier: str) -> LicenseTemplate | None:
        return self.templates.get(identifier)

    def save_template(self, template: LicenseTemplate) -> None:
        self.templates[template.identifier] = template

    def load_index(self) -> CatalogIndex | None:
        return self.index

    def save_index(self, index: CatalogIndex) -> None:
        self.index = index

    def identifiers(self) -> list[str]:
        return sorted(self.templates)

    def clear(self) -> int:
        removed = len(self.templates) + (self.index is not None)
        self.templates.clear()
        self.index = None
        return removed
