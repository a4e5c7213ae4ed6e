"""Diacritic and case insensitive catalog search."""
from __future__ import annotations

import logging
import re
from typing import Iterable, Iterator, Optional, Pattern

from bookshelf.metadata import Record

LOGGER = logging.getLogger("bookshelf.query")

MATCH_ANY = re.compile(r"^(\.*|\s*)$")

FOLDINGS = {
    "ae": "(?:ae|æ)",
    "oe": "(?:oe|œ)",
    "a": "[aáàâä]",
    "e": "[eéèêë]",
    "i": "[iíìîï]",
    "o": "[oóòôö]",
    "u": "[uúùûü]",
    "c": "[cç]",
}
FOLDING_REGEX = re.compile("ae|oe|[aeiouc]", re.IGNORECASE)


def make_query(text: str) -> Optional[Pattern[str]]:
    """Compile free text into a search pattern.

    Returns None, meaning no filter, for blank or dots-only text. An invalid
    pattern is reported and also yields None.
    """
    if MATCH_ANY.match(text):
        return None

    folded = FOLDING_REGEX.sub(lambda m: FOLDINGS[m.group(0).lower()], text)
    try:
        return re.compile(folded, re.IGNORECASE)
    except re.error as exc:
        LOGGER.warning("Invalid query %r: %s", text, exc)
        return None


def is_match(record: Record, query: Optional[Pattern[str]]) -> bool:
    if query is None:
        return True
    return bool(
        query.search(record.title)
        or query.search(record.subtitle)
        or query.search(record.author)
        or query.search(record.series)
        or any(query.search(category) for category in record.categories)
        or query.search(str(record.file.path))
    )


def filter_records(catalog: Iterable[Record], text: str) -> Iterator[Record]:
    query = make_query(text)
    return (record for record in catalog if is_match(record, query))
