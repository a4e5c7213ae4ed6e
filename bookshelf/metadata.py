"""
Catalog records for bookshelf
Records, reader state and the sparse JSON shape of the catalog files
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Annotated, Any, Dict, List, Optional, Set, Tuple, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    RootModel,
    SerializerFunctionWrapHandler,
    model_serializer,
)
from pydantic.alias_generators import to_camel

METADATA_FILENAME = ".metadata.json"
IMPORTED_MD_FILENAME = ".metadata-imported.json"
TRASH_NAME = ".trash"

RESERVED_DIRECTORIES = frozenset({TRASH_NAME})

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_ENGLISH_PREFIX = re.compile(r"^(The|An?)\s")
_FRENCH_PREFIX = re.compile(r"^(Les?\s|La\s|L['’]|Une?\s|Des?\s|Du\s)")

# Leading articles ignored when sorting by title, keyed by record language.
TITLE_PREFIXES = MappingProxyType({
    "": _ENGLISH_PREFIX,
    "en": _ENGLISH_PREFIX,
    "english": _ENGLISH_PREFIX,
    "fr": _FRENCH_PREFIX,
    "french": _FRENCH_PREFIX,
})


def _parse_date(value: Any) -> Any:
    if isinstance(value, str):
        return datetime.strptime(value, DATE_FORMAT)
    return value


def _format_date(value: datetime) -> str:
    return value.strftime(DATE_FORMAT)


def _at_least_one_page(value: Any) -> Any:
    # Catalogs written elsewhere may store 0 for unknown page counts.
    if isinstance(value, int) and value < 1:
        return 1
    return value


def _sorted_list(values: Set[Any]) -> List[Any]:
    return sorted(values)


SimpleDate = Annotated[
    datetime,
    BeforeValidator(_parse_date),
    PlainSerializer(_format_date, return_type=str, when_used="json"),
]
LabelSet = Annotated[
    Set[str],
    PlainSerializer(_sorted_list, return_type=List[str], when_used="json"),
]
PageSet = Annotated[
    Set[int],
    PlainSerializer(_sorted_list, return_type=List[int], when_used="json"),
]
PageCount = Annotated[int, BeforeValidator(_at_least_one_page), Field(ge=1)]

# A reflowable offset or a fixed (page, offset) position.
TextLocation = Union[int, Tuple[int, int]]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, (str, list, dict, set, tuple)) and not value


class CatalogModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SparseModel(CatalogModel):
    """Omits empty strings, empty collections and unset options when dumped."""

    @model_serializer(mode="wrap")
    def _drop_empty(self, handler: SerializerFunctionWrapHandler) -> Dict[str, Any]:
        data = handler(self)
        return {key: value for key, value in data.items() if not _is_empty(value)}


class FileInfo(CatalogModel):
    path: Path = Path()
    kind: str = ""
    size: int = 0


class Margin(CatalogModel):
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0


class PageScheme(Enum):
    ANY = "any"
    EVEN_ODD = "even-odd"


class CroppingMargins(RootModel[Union[Margin, Tuple[Margin, Margin]]]):
    """Either one margin for every page or an (even, odd) pair."""

    def margin(self, index: int) -> Margin:
        if isinstance(self.root, Margin):
            return self.root
        return self.root[index % 2]

    def set_margin(self, index: int, margin: Margin) -> None:
        if isinstance(self.root, Margin):
            self.root = margin
        elif index % 2 == 0:
            self.root = (margin, self.root[1])
        else:
            self.root = (self.root[0], margin)

    def apply(self, index: int, scheme: PageScheme) -> None:
        """Switch scheme, keeping the margin currently used by page ``index``."""
        margin = self.margin(index)
        if scheme is PageScheme.ANY:
            self.root = margin.model_copy()
        else:
            self.root = (margin.model_copy(), margin.model_copy())

    def is_split(self) -> bool:
        return not isinstance(self.root, Margin)


class ZoomMode(str, Enum):
    FIT_TO_PAGE = "FitToPage"
    FIT_TO_WIDTH = "FitToWidth"


class TextAlign(str, Enum):
    JUSTIFY = "justify"
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"

    def icon_name(self) -> str:
        return f"align-{self.value}"


class Annotation(SparseModel):
    note: str = ""
    text: str = ""
    selection: Tuple[TextLocation, TextLocation] = (0, 1)
    modified: SimpleDate = Field(default_factory=datetime.now)


class ReaderInfo(SparseModel):
    opened: SimpleDate = Field(default_factory=datetime.now)
    current_page: int = 0
    pages_count: PageCount = 1
    finished: bool = False
    zoom_mode: Optional[ZoomMode] = None
    top_offset: Optional[int] = None
    rotation: Optional[int] = None
    cropping_margins: Optional[CroppingMargins] = None
    margin_width: Optional[int] = None
    screen_margin_width: Optional[int] = None
    font_family: Optional[str] = None
    font_size: Optional[float] = None
    text_align: Optional[TextAlign] = None
    line_height: Optional[float] = None
    contrast_exponent: Optional[float] = None
    contrast_gray: Optional[float] = None
    page_names: Dict[int, str] = Field(default_factory=dict)
    bookmarks: PageSet = Field(default_factory=set)
    annotations: List[Annotation] = Field(default_factory=list)

    @classmethod
    def new(cls, pages_count: int = 1) -> "ReaderInfo":
        return cls(opened=datetime.now(), pages_count=max(1, pages_count))

    def progress(self) -> float:
        if self.pages_count < 1:
            return math.nan
        return self.current_page / self.pages_count


class TocEntry(CatalogModel):
    title: str
    location: Union[int, str]
    children: List["TocEntry"] = Field(default_factory=list)


TocEntry.model_rebuild()


class SimpleStatus(str, Enum):
    NEW = "New"
    READING = "Reading"
    FINISHED = "Finished"


@dataclass(frozen=True)
class Status:
    kind: SimpleStatus
    fraction: float = 0.0


class Record(SparseModel):
    """One catalog entry, identified by its file path relative to the library."""

    title: str = ""
    subtitle: str = ""
    author: str = ""
    year: str = ""
    language: str = ""
    publisher: str = ""
    series: str = ""
    edition: str = ""
    volume: str = ""
    number: str = ""
    isbn: str = ""
    categories: LabelSet = Field(default_factory=set)
    file: FileInfo = Field(default_factory=FileInfo)
    reader: Optional[ReaderInfo] = None
    toc: Optional[List[TocEntry]] = None
    added: SimpleDate = Field(default_factory=datetime.now)

    def status(self) -> Status:
        if self.reader is None:
            return Status(SimpleStatus.NEW)
        if self.reader.finished:
            return Status(SimpleStatus.FINISHED)
        return Status(SimpleStatus.READING, self.reader.progress())

    def simple_status(self) -> SimpleStatus:
        return self.status().kind

    def ensure_reader(self, pages_count: int = 1) -> ReaderInfo:
        if self.reader is None:
            self.reader = ReaderInfo.new(pages_count)
        return self.reader

    def file_stem(self) -> str:
        return self.file.path.stem

    def display_author(self) -> str:
        return self.author or "Unknown Author"

    def display_title(self) -> str:
        """Title decorated with number, volume, subtitle and series."""
        if not self.title:
            return self.file_stem()

        title = self.title

        if self.number and not self.series:
            title = f"{title} #{self.number}"

        if self.volume:
            title = f"{title} — vol. {self.volume}"

        if self.subtitle:
            if self.subtitle[0].isalnum() and title[-1].isalnum():
                title = f"{title}: {self.subtitle}"
            else:
                title = f"{title} {self.subtitle}"

        if self.series and self.number:
            title = f"{title} ({self.series} #{self.number})"

        return title

    # NOTE: compound surnames (Le Carré, Miller Jr.) are keyed on their last word.
    def alphabetic_author(self) -> str:
        return self.display_author().split(",")[0].split(" ")[-1]

    def alphabetic_title(self) -> str:
        prefix = TITLE_PREFIXES.get(self.language.lower())
        if prefix is not None:
            match = prefix.match(self.title)
            if match:
                return self.title[match.end():]
        return self.title

    def label(self) -> str:
        return f"{self.display_title()} · {self.display_author()}"

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
