"""Best-effort file kind detection by extension, then by magic bytes."""
from __future__ import annotations

import zipfile
import zlib
from pathlib import Path
from typing import Union

EPUB_MIMETYPE = b"application/epub+zip"

MAGIC_NUMBERS = (
    (b"%PDF", "pdf"),
    (b"AT&TFORM", "djvu"),
)


def file_kind(path: Union[str, Path]) -> str:
    path = Path(path)
    suffix = path.suffix.lower().lstrip(".")
    if suffix:
        return suffix
    try:
        return _sniff(path)
    except OSError:
        return ""


def _sniff(path: Path) -> str:
    with open(path, "rb") as fh:
        head = fh.read(8)
    for magic, kind in MAGIC_NUMBERS:
        if head.startswith(magic):
            return kind
    if head.startswith(b"PK\x03\x04"):
        try:
            with zipfile.ZipFile(path) as archive:
                if archive.read("mimetype").strip() == EPUB_MIMETYPE:
                    return "epub"
        except (KeyError, RuntimeError, NotImplementedError, zlib.error, zipfile.BadZipFile):
            # Unreadable mimetype member: still a zip, but not a usable EPUB.
            pass
        return "cbz"
    return ""
