"""
PDF metadata reader for bookshelf
Reads the document information dictionary with PyMuPDF
"""
import re
from typing import Optional, Set

import fitz  # PyMuPDF

from bookshelf.parsers.errors import DocumentError

YEAR_REGEX = re.compile(r"(\d{4})")


class PdfDocument:
    """
    PDF document opened with PyMuPDF (fitz)
    """

    def __init__(self, file_path: str):
        try:
            doc = fitz.open(str(file_path))
        except Exception as e:
            raise DocumentError(f"Failed to open PDF: {str(e)}") from e
        try:
            self.info = dict(doc.metadata or {})
        finally:
            doc.close()

    def _field(self, name: str) -> Optional[str]:
        value = self.info.get(name)
        if value and value.strip():
            return value.strip()
        return None

    def title(self) -> Optional[str]:
        return self._field("title")

    def author(self) -> Optional[str]:
        return self._field("author")

    def year(self) -> Optional[str]:
        created = self._field("creationDate")
        if created:
            match = YEAR_REGEX.search(created)
            if match:
                return match.group(1)
        return None

    def publisher(self) -> Optional[str]:
        return None

    def series(self) -> Optional[str]:
        return None

    def series_index(self) -> Optional[str]:
        return None

    def language(self) -> Optional[str]:
        return None

    def categories(self) -> Set[str]:
        keywords = self._field("keywords") or ""
        return {keyword.strip() for keyword in keywords.split(",") if keyword.strip()}
