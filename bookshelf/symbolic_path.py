"""Nested directory paths flattened into single category labels."""
from __future__ import annotations

from pathlib import PurePath
from typing import Optional, Union

# ASCII unit separator, never typed by users.
PATH_SEPARATOR = "\x1f"


def flatten(path: Union[str, PurePath]) -> str:
    """Encode a relative directory path as one category token.

    Occurrences of the private separator inside real path segments are
    stripped first so that decoding cannot produce spurious levels.
    """
    parts = [part.replace(PATH_SEPARATOR, "") for part in PurePath(path).parts]
    return PATH_SEPARATOR.join(part for part in parts if part and part != ".")


def expand(category: str) -> PurePath:
    return PurePath(*category.split(PATH_SEPARATOR)) if category else PurePath()


def parent(category: str) -> Optional[str]:
    if PATH_SEPARATOR not in category:
        return None
    return category.rsplit(PATH_SEPARATOR, 1)[0]


def display(category: str, separator: str = "/") -> str:
    return category.replace(PATH_SEPARATOR, separator)
