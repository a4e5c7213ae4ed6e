"""
EPUB metadata reader for bookshelf
Reads the OPF package metadata with ebooklib
"""
from typing import Iterator, Optional, Set, Tuple

from ebooklib import epub

from bookshelf.parsers.errors import DocumentError


class EpubDocument:
    """
    EPUB container opened with ebooklib; each accessor fails independently
    """

    def __init__(self, file_path: str):
        try:
            self.book = epub.read_epub(str(file_path), options={"ignore_ncx": True})
        except Exception as e:
            raise DocumentError(f"Failed to open EPUB: {str(e)}") from e

    def _dc(self, name: str) -> Optional[str]:
        try:
            values = self.book.get_metadata("DC", name)
        except KeyError:
            return None
        for value, _ in values:
            if value and value.strip():
                return value.strip()
        return None

    def _meta_entries(self) -> Iterator[Tuple[Optional[str], dict]]:
        for entries in self.book.metadata.values():
            for values in entries.values():
                for value, attributes in values:
                    yield value, attributes or {}

    def _named_meta(self, name: str) -> Optional[str]:
        """EPUB2 style <meta name="..." content="..."/>"""
        for _, attributes in self._meta_entries():
            if attributes.get("name") == name and attributes.get("content"):
                return attributes["content"].strip()
        return None

    def _property_meta(self, prop: str, refines: Optional[str] = None) -> Tuple[Optional[str], Optional[str]]:
        """EPUB3 style <meta property="...">value</meta>, returning (value, id)"""
        for value, attributes in self._meta_entries():
            if attributes.get("property") != prop or not value:
                continue
            if refines is not None and attributes.get("refines") != refines:
                continue
            return value.strip(), attributes.get("id")
        return None, None

    def title(self) -> Optional[str]:
        return self._dc("title")

    def author(self) -> Optional[str]:
        try:
            creators = self.book.get_metadata("DC", "creator")
        except KeyError:
            return None
        names = [value.strip() for value, _ in creators if value and value.strip()]
        return ", ".join(names) if names else None

    def year(self) -> Optional[str]:
        date = self._dc("date")
        return date[:4] if date else None

    def publisher(self) -> Optional[str]:
        return self._dc("publisher")

    def language(self) -> Optional[str]:
        return self._dc("language")

    def series(self) -> Optional[str]:
        series = self._named_meta("calibre:series")
        if series:
            return series
        collection, _ = self._property_meta("belongs-to-collection")
        return collection

    def series_index(self) -> Optional[str]:
        index = self._named_meta("calibre:series_index")
        if index:
            return index
        _, collection_id = self._property_meta("belongs-to-collection")
        if collection_id:
            position, _ = self._property_meta("group-position", refines=f"#{collection_id}")
            return position
        return None

    def categories(self) -> Set[str]:
        try:
            subjects = self.book.get_metadata("DC", "subject")
        except KeyError:
            return set()
        return {value.strip() for value, _ in subjects if value and value.strip()}
