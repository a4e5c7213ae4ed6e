"""Catalog files: a JSON array of records, written sparse."""
from __future__ import annotations

import json
from pathlib import Path
from typing import List

from pydantic import TypeAdapter

from bookshelf.metadata import Record

_CATALOG = TypeAdapter(List[Record])


def load_catalog(path: Path) -> List[Record]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return _CATALOG.validate_python(json.load(fh))
    except FileNotFoundError:
        return []


def save_catalog(path: Path, records: List[Record]) -> None:
    payload = _CATALOG.dump_python(records, mode="json", by_alias=True)
    tmp_path = Path(path).with_suffix(".tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, ensure_ascii=False, indent=2)
            fh.write("\n")
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise
    tmp_path.replace(path)
