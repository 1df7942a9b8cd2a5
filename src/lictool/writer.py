"""Writing rendered license text to the project directory."""

from __future__ import annotations

from pathlib import Path

from lictool.errors import LicenseFileExistsError
from lictool.models import RenderedLicense


DEFAULT_LICENSE_FILENAME = "LICENSE"


def write_license(
    path: Path,
    rendered: RenderedLicense,
    *,
    force: bool = False,
) -> Path:
    """
    Write ``rendered`` to ``path``.

    Parameters
    ----------
    path : Path
        Destination file. Parent directories are created.
    rendered : RenderedLicense
        Text to write, byte for byte (UTF-8).
    force : bool
        Overwrite an existing file.

    Returns
    -------
    Path
        The path written.

    Raises
    ------
    LicenseFileExistsError
        If ``path`` is an existing file and ``force`` is false.
    """
    if path.is_file() and not force:
        raise LicenseFileExistsError(path)

    path.parent.mkdir(parents=True, exist_ok=True)
    # newline="" keeps the text byte-stable on Windows
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(rendered.text)
    return path
