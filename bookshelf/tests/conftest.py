import zipfile
from pathlib import Path

import pytest

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

CONTENT_OPF = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="2.0" unique-identifier="bookid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:opf="http://www.idpf.org/2007/opf">
    <dc:identifier id="bookid">urn:uuid:0b6e0b1c-52d4-4c43-9d3f-6b8b3a0c1d2e</dc:identifier>
{metadata}
  </metadata>
  <manifest>
    <item id="chapter1" href="chapter1.xhtml" media-type="application/xhtml+xml"/>
  </manifest>
  <spine>
    <itemref idref="chapter1"/>
  </spine>
</package>
"""

CHAPTER_XHTML = """<?xml version="1.0" encoding="UTF-8"?>
<html xmlns="http://www.w3.org/1999/xhtml"><head><title>One</title></head>
<body><p>A beginning is the time for taking the most delicate care.</p></body></html>
"""

DUNE_METADATA = """\
    <dc:title>Dune</dc:title>
    <dc:creator opf:role="aut">Frank Herbert</dc:creator>
    <dc:date>1965-08-01</dc:date>
    <dc:publisher>Chilton Books</dc:publisher>
    <dc:language>en</dc:language>
    <dc:subject>Science Fiction</dc:subject>
    <dc:subject>Ecology</dc:subject>
    <meta name="calibre:series" content="Dune Chronicles"/>
    <meta name="calibre:series_index" content="1"/>"""


def write_epub(path: Path, metadata: str = DUNE_METADATA) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("mimetype", "application/epub+zip")
        archive.writestr("META-INF/container.xml", CONTAINER_XML)
        archive.writestr("OEBPS/content.opf", CONTENT_OPF.format(metadata=metadata))
        archive.writestr("OEBPS/chapter1.xhtml", CHAPTER_XHTML)
    return path


@pytest.fixture
def make_epub(tmp_path: Path):
    def _make(relative: str, metadata: str = DUNE_METADATA) -> Path:
        return write_epub(tmp_path / relative, metadata)

    return _make


@pytest.fixture
def touch(tmp_path: Path):
    def _touch(relative: str, content: str = "x") -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _touch


def write_damaged_zip(path: Path) -> Path:
    """Zip whose deflated mimetype member no longer decompresses."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("mimetype", "application/epub+zip" * 8)
        info = archive.getinfo("mimetype")
    data = bytearray(path.read_bytes())
    start = info.header_offset + 30 + len(info.filename)
    # Reserved deflate block type.
    data[start:start + info.compress_size] = b"\xff" * info.compress_size
    path.write_bytes(bytes(data))
    return path


@pytest.fixture
def make_damaged_zip(tmp_path: Path):
    def _make(relative: str) -> Path:
        return write_damaged_zip(tmp_path / relative)

    return _make
