"""
Catalog ordering
One comparator per sort key; reversing negates the comparator
"""
from __future__ import annotations

from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, Dict, List

from bookshelf.metadata import Record, SimpleStatus

Comparator = Callable[[Record, Record], int]


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


class SortMethod(str, Enum):
    OPENED = "opened"
    ADDED = "added"
    PROGRESS = "progress"
    AUTHOR = "author"
    TITLE = "title"
    YEAR = "year"
    SIZE = "size"
    KIND = "kind"
    PAGES = "pages"
    FILE_NAME = "file-name"
    FILE_PATH = "file-path"

    def reverse_order(self) -> bool:
        """Whether this key is shown in descending order by default."""
        return self not in _ASCENDING

    def label(self) -> str:
        return _LABELS[self]

    def title(self) -> str:
        return f"Sort by: {self.label()}"


_ASCENDING = frozenset({
    SortMethod.AUTHOR,
    SortMethod.TITLE,
    SortMethod.KIND,
    SortMethod.FILE_NAME,
    SortMethod.FILE_PATH,
})

_LABELS = {
    SortMethod.OPENED: "Date Opened",
    SortMethod.ADDED: "Date Added",
    SortMethod.PROGRESS: "Progress",
    SortMethod.AUTHOR: "Author",
    SortMethod.TITLE: "Title",
    SortMethod.YEAR: "Year",
    SortMethod.SIZE: "File Size",
    SortMethod.KIND: "File Type",
    SortMethod.PAGES: "Pages",
    SortMethod.FILE_NAME: "File Name",
    SortMethod.FILE_PATH: "File Path",
}


def _by_reader(r1: Record, r2: Record, key: Callable) -> int:
    if r1.reader is None and r2.reader is None:
        return 0
    if r1.reader is None:
        return -1
    if r2.reader is None:
        return 1
    return _cmp(key(r1.reader), key(r2.reader))


def sort_opened(r1: Record, r2: Record) -> int:
    return _by_reader(r1, r2, lambda reader: reader.opened)


def sort_pages(r1: Record, r2: Record) -> int:
    return _by_reader(r1, r2, lambda reader: reader.pages_count)


def sort_added(r1: Record, r2: Record) -> int:
    return _cmp(r1.added, r2.added)


# Code point order: 'É' sorts after 'Z'.
def sort_author(r1: Record, r2: Record) -> int:
    return _cmp(r1.alphabetic_author(), r2.alphabetic_author())


def sort_title(r1: Record, r2: Record) -> int:
    return _cmp(r1.alphabetic_title(), r2.alphabetic_title())


_STATUS_RANK = {
    SimpleStatus.FINISHED: 0,
    SimpleStatus.NEW: 1,
    SimpleStatus.READING: 2,
}


def sort_progress(r1: Record, r2: Record) -> int:
    """Finished < New < Reading, readings ordered by fraction."""
    s1, s2 = r1.status(), r2.status()
    if s1.kind is SimpleStatus.READING and s2.kind is SimpleStatus.READING:
        # NaN compares false both ways, hence equal.
        return _cmp(s1.fraction, s2.fraction)
    return _cmp(_STATUS_RANK[s1.kind], _STATUS_RANK[s2.kind])


def sort_size(r1: Record, r2: Record) -> int:
    return _cmp(r1.file.size, r2.file.size)


def sort_kind(r1: Record, r2: Record) -> int:
    return _cmp(r1.file.kind, r2.file.kind)


def sort_year(r1: Record, r2: Record) -> int:
    return _cmp(r1.year, r2.year)


def sort_filename(r1: Record, r2: Record) -> int:
    return _cmp(r1.file.path.name, r2.file.path.name)


def sort_filepath(r1: Record, r2: Record) -> int:
    return _cmp(r1.file.path, r2.file.path)


COMPARATORS: Dict[SortMethod, Comparator] = {
    SortMethod.OPENED: sort_opened,
    SortMethod.ADDED: sort_added,
    SortMethod.PROGRESS: sort_progress,
    SortMethod.AUTHOR: sort_author,
    SortMethod.TITLE: sort_title,
    SortMethod.YEAR: sort_year,
    SortMethod.SIZE: sort_size,
    SortMethod.KIND: sort_kind,
    SortMethod.PAGES: sort_pages,
    SortMethod.FILE_NAME: sort_filename,
    SortMethod.FILE_PATH: sort_filepath,
}


def sort(catalog: List[Record], method: SortMethod, reverse: bool = False) -> None:
    compare = COMPARATORS[SortMethod(method)]
    if reverse:
        catalog.sort(key=cmp_to_key(lambda a, b: -compare(a, b)))
    else:
        catalog.sort(key=cmp_to_key(compare))
