"""Document container readers, keyed by file kind."""
from pathlib import Path
from typing import Union

from bookshelf.parsers.epub_parser import EpubDocument
from bookshelf.parsers.errors import DocumentError
from bookshelf.parsers.pdf_parser import PdfDocument

PARSER_REGISTRY = {
    "epub": EpubDocument,
    "pdf": PdfDocument,
}


def open_document(path: Union[str, Path], kind: str):
    parser_cls = PARSER_REGISTRY.get(kind)
    if parser_cls is None:
        raise DocumentError(f"No parser registered for {kind!r}")
    return parser_cls(str(path))


__all__ = ["DocumentError", "EpubDocument", "PdfDocument", "PARSER_REGISTRY", "open_document"]
