"""
Bibliographic field derivation
Fills empty records from embedded document metadata or from the file name
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

from bookshelf.metadata import Record
from bookshelf.parsers import DocumentError, open_document
from bookshelf.settings import CategoryProvider, ImportSettings

LOGGER = logging.getLogger("bookshelf.derive")


def _read(accessor: Callable[[], Optional[str]]) -> str:
    try:
        return accessor() or ""
    except DocumentError:
        return ""


def extract_metadata_from_document(
    directory: Path,
    records: Iterable[Record],
    settings: ImportSettings,
    open_document: Callable = open_document,
) -> None:
    """Fill untitled records from their container's embedded metadata.

    A document that cannot be opened is reported and left untouched; the
    remaining records are still processed.
    """
    subjects_as_categories = CategoryProvider.SUBJECT in settings.category_providers

    for record in records:
        if record.title or record.file.kind not in settings.metadata_kinds:
            continue

        path = Path(directory) / record.file.path
        try:
            doc = open_document(path, record.file.kind)
        except DocumentError as exc:
            LOGGER.warning("%s: %s", record.file.path, exc)
            continue

        record.title = _read(doc.title)
        record.author = _read(doc.author)
        record.year = _read(doc.year)
        record.publisher = _read(doc.publisher)
        record.series = _read(doc.series)
        if record.series:
            record.number = _read(doc.series_index)
        record.language = _read(doc.language)
        if subjects_as_categories:
            try:
                record.categories |= set(doc.categories())
            except DocumentError as exc:
                LOGGER.warning("%s: %s", record.file.path, exc)
        LOGGER.info("%s", record.label())


class Trim(Enum):
    NONE = "none"
    LEADING = "leading"
    TRAILING = "trailing"
    BOTH = "both"

    def __call__(self, text: str) -> str:
        if self is Trim.LEADING:
            return text.lstrip()
        if self is Trim.TRAILING:
            return text.rstrip()
        if self is Trim.BOTH:
            return text.strip()
        return text


@dataclass(frozen=True)
class FilenameRule:
    delimiter: str
    field: str
    trim: Trim


class Cursor:
    """Forward-only position in a file name."""

    def __init__(self, text: str, position: int = 0):
        self.text = text
        self.position = position

    def take_until(self, delimiter: str) -> Optional[str]:
        index = self.text.find(delimiter, self.position)
        if index < 0:
            return None
        value = self.text[self.position:index]
        self.position = index + len(delimiter)
        return value


SERIES_RULE = FilenameRule(")", "series", Trim.TRAILING)
AUTHOR_RULE = FilenameRule("- ", "author", Trim.BOTH)
TITLE_RULE = FilenameRule("_", "title", Trim.LEADING)
SUBTITLE_RULE = FilenameRule("-", "subtitle", Trim.LEADING)
PUBLISHER_RULE = FilenameRule("(", "publisher", Trim.TRAILING)
YEAR_RULE = FilenameRule(")", "year", Trim.NONE)


def _apply(cursor: Cursor, rule: FilenameRule, fields: Dict[str, str], field: Optional[str] = None) -> None:
    value = cursor.take_until(rule.delimiter)
    if value is not None:
        fields[field or rule.field] = rule.trim(value)


def parse_filename(stem: str) -> Dict[str, str]:
    """Split ``(Series) Author - Title_Subtitle-Publisher(Year)``.

    Every step starts where the previous successful one stopped; a step
    whose delimiter is missing is skipped and leaves its field unset.
    """
    fields: Dict[str, str] = {}
    cursor = Cursor(stem)

    if stem.startswith("("):
        cursor.position = 1
        _apply(cursor, SERIES_RULE, fields)

    _apply(cursor, AUTHOR_RULE, fields)

    title_start = cursor.position
    _apply(cursor, TITLE_RULE, fields)
    # Without an underscore the text before the hyphen is the title itself.
    _apply(cursor, SUBTITLE_RULE, fields, "title" if cursor.position == title_start else None)

    _apply(cursor, PUBLISHER_RULE, fields)
    _apply(cursor, YEAR_RULE, fields)
    return fields


def extract_metadata_from_filename(records: Iterable[Record]) -> None:
    for record in records:
        if record.title:
            continue
        for field, value in parse_filename(record.file_stem()).items():
            setattr(record, field, value)
        LOGGER.info("%s", record.label())
