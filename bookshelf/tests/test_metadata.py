import math
import re
from datetime import datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from bookshelf.metadata import (
    CroppingMargins,
    FileInfo,
    Margin,
    PageScheme,
    ReaderInfo,
    Record,
    SimpleStatus,
    TextAlign,
)


def test_title_with_series_and_number():
    record = Record(title="Foundation", series="Foundation", number="1")

    assert record.display_title() == "Foundation (Foundation #1)"


def test_title_composition_rules():
    assert Record(title="Dune", number="3").display_title() == "Dune #3"
    assert Record(title="Dune", volume="2").display_title() == "Dune — vol. 2"
    assert Record(title="Dune", subtitle="A Novel").display_title() == "Dune: A Novel"
    assert Record(title="Dune", subtitle="(abridged)").display_title() == "Dune (abridged)"
    assert Record(file=FileInfo(path=Path("dir/Some File.pdf"))).display_title() == "Some File"


def test_label_uses_placeholder_author():
    assert Record(title="Dune").label() == "Dune · Unknown Author"


def test_alphabetic_title_strips_language_articles():
    assert Record(title="The Hobbit").alphabetic_title() == "Hobbit"
    assert Record(title="Les Misérables", language="fr").alphabetic_title() == "Misérables"
    assert Record(title="L’Étranger", language="french").alphabetic_title() == "Étranger"
    assert Record(title="The Hobbit", language="fr").alphabetic_title() == "The Hobbit"


def test_status_follows_reader_state():
    record = Record()
    assert record.simple_status() is SimpleStatus.NEW

    reader = record.ensure_reader(pages_count=8)
    reader.current_page = 2
    assert record.ensure_reader() is reader
    assert record.status().kind is SimpleStatus.READING
    assert record.status().fraction == 0.25

    reader.finished = True
    assert record.simple_status() is SimpleStatus.FINISHED


def test_reader_page_count_is_at_least_one():
    assert ReaderInfo.model_validate({"pagesCount": 0, "currentPage": 3}).pages_count == 1
    assert ReaderInfo(pages_count=-4).pages_count == 1
    assert ReaderInfo.new(0).pages_count == 1
    with pytest.raises(ValidationError):
        ReaderInfo(pages_count="many")


def test_unvalidated_reader_without_pages_has_undefined_progress():
    assert math.isnan(ReaderInfo.model_construct(current_page=3, pages_count=0).progress())


def test_cropping_margins_keep_active_margin_when_switching():
    margins = CroppingMargins(Margin(top=0.1))
    assert not margins.is_split()

    margins.apply(3, PageScheme.EVEN_ODD)
    assert margins.is_split()
    assert margins.margin(0).top == 0.1
    assert margins.margin(1).top == 0.1

    margins.set_margin(1, Margin(top=0.2))
    assert margins.margin(3).top == 0.2
    assert margins.margin(0).top == 0.1

    margins.apply(1, PageScheme.ANY)
    assert not margins.is_split()
    assert margins.margin(0).top == 0.2


def test_json_shape_is_sparse_and_camel_cased():
    record = Record(
        title="Dune",
        categories={"b", "a"},
        file=FileInfo(path=Path("sf/dune.epub"), kind="epub", size=42),
        added=datetime(2024, 5, 6, 7, 8, 9),
        reader=ReaderInfo(
            opened=datetime(2024, 5, 7, 0, 0, 0),
            current_page=3,
            pages_count=10,
            bookmarks={9, 2},
            text_align=TextAlign.JUSTIFY,
        ),
    )

    data = record.to_json_dict()

    assert data == {
        "title": "Dune",
        "categories": ["a", "b"],
        "file": {"path": "sf/dune.epub", "kind": "epub", "size": 42},
        "reader": {
            "opened": "2024-05-07 00:00:00",
            "currentPage": 3,
            "pagesCount": 10,
            "finished": False,
            "textAlign": "justify",
            "bookmarks": [2, 9],
        },
        "added": "2024-05-06 07:08:09",
    }


def test_json_shape_parses_back():
    record = Record.model_validate(
        {
            "file": {"path": "a.pdf"},
            "added": "2023-01-02 03:04:05",
            "reader": {
                "opened": "2024-01-02 03:04:05",
                "currentPage": 3,
                "pagesCount": 6,
                "pageNames": {"1": "i"},
                "croppingMargins": [{"top": 0.1}, {"bottom": 0.2}],
                "annotations": [{"note": "check", "selection": [4, [5, 6]], "modified": "2024-01-03 00:00:00"}],
            },
        }
    )

    assert record.file.path == Path("a.pdf")
    assert record.added == datetime(2023, 1, 2, 3, 4, 5)
    assert record.reader.page_names == {1: "i"}
    assert record.reader.cropping_margins.is_split()
    assert record.reader.cropping_margins.margin(1).bottom == 0.2
    assert record.reader.annotations[0].selection == (4, (5, 6))
    assert re.fullmatch(r"\d{4}-\d\d-\d\d \d\d:\d\d:\d\d", record.to_json_dict()["reader"]["opened"])
