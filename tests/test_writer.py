"""Tests for lictool.writer."""

from pathlib import Path

import pytest

from lictool.errors import LicenseFileExistsError
from lictool.models import RenderedLicense
from lictool.writer import write_license


RENDERED = RenderedLicense(identifier="MIT", text="MIT License\r\n\nCopyright 2024 Jane\n")


class TestWriteLicense:
    """Tests for write_license."""

    def test_writes_exact_bytes(self, tmp_path: Path) -> None:
        """Line endings are not translated."""
        path = write_license(tmp_path / "LICENSE", RENDERED)
        assert path.read_bytes() == RENDERED.text.encode("utf-8")

    def test_creates_parents(self, tmp_path: Path) -> None:
        path = write_license(tmp_path / "docs" / "LICENSE.txt", RENDERED)
        assert path.is_file()

    def test_existing_file_refused(self, tmp_path: Path) -> None:
        target = tmp_path / "LICENSE"
        target.write_text("keep me", encoding="utf-8")

        with pytest.raises(LicenseFileExistsError) as exc:
            write_license(target, RENDERED)

        assert exc.value.path == target
        assert isinstance(exc.value, FileExistsError)
        assert target.read_text(encoding="utf-8") == "keep me"

    def test_force_overwrites(self, tmp_path: Path) -> None:
        target = tmp_path / "LICENSE"
        target.write_text("old", encoding="utf-8")

        write_license(target, RENDERED, force=True)
        assert target.read_bytes() == RENDERED.text.encode("utf-8")
