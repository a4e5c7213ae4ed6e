"""
Settings loader shared between the FastAPI app and the importer
Reads config/settings.yaml; the import section drives scanning and derivation
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Optional

import yaml

ROOT_DIR = Path(__file__).resolve().parents[1]
CONFIG_PATH = Path(os.environ.get("BOOKSHELF_CONFIG", ROOT_DIR / "config" / "settings.yaml"))

DEFAULT_ALLOWED_KINDS = frozenset({"pdf", "djvu", "epub", "fb2", "xps", "oxps", "cbz", "html", "htm"})
DEFAULT_METADATA_KINDS = frozenset({"epub"})


class CategoryProvider(str, Enum):
    PATH = "path"
    SUBJECT = "subject"


def load_settings(path: Optional[Path] = None) -> Dict:
    try:
        with open(path or CONFIG_PATH, "r", encoding="utf-8") as fh:
            return yaml.safe_load(fh) or {}
    except FileNotFoundError:
        return {}


def save_settings(settings: Dict, path: Optional[Path] = None) -> None:
    target = Path(path or CONFIG_PATH)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as fh:
        yaml.safe_dump(settings, fh, allow_unicode=True, sort_keys=False)


def library_path(settings: Dict) -> Optional[Path]:
    value = os.environ.get("BOOKSHELF_LIBRARY_PATH") or settings.get("library_path")
    return Path(value).expanduser() if value else None


def _kinds(values: Optional[Iterable], default: FrozenSet[str]) -> FrozenSet[str]:
    if values is None:
        return default
    return frozenset(str(value).lower().lstrip(".") for value in values)


@dataclass(frozen=True)
class ImportSettings:
    traverse_hidden: bool = False
    allowed_kinds: FrozenSet[str] = DEFAULT_ALLOWED_KINDS
    metadata_kinds: FrozenSet[str] = DEFAULT_METADATA_KINDS
    category_providers: FrozenSet[CategoryProvider] = field(default_factory=frozenset)

    @classmethod
    def from_mapping(cls, mapping: Optional[Dict]) -> "ImportSettings":
        data = dict(mapping or {})
        providers = frozenset(
            CategoryProvider(str(name).lower()) for name in data.get("category_providers") or ()
        )
        return cls(
            traverse_hidden=bool(data.get("traverse_hidden", False)),
            allowed_kinds=_kinds(data.get("allowed_kinds"), DEFAULT_ALLOWED_KINDS),
            metadata_kinds=_kinds(data.get("metadata_kinds"), DEFAULT_METADATA_KINDS),
            category_providers=providers,
        )

    @classmethod
    def from_settings(cls, settings: Dict) -> "ImportSettings":
        return cls.from_mapping(settings.get("import"))
