from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, List, Sequence

from bookshelf import symbolic_path
from bookshelf.derive import extract_metadata_from_document
from bookshelf.file_kind import file_kind
from bookshelf.metadata import RESERVED_DIRECTORIES, FileInfo, Record
from bookshelf.settings import CategoryProvider, ImportSettings

LOGGER = logging.getLogger("bookshelf.library")

Classifier = Callable[[Path], str]


class ScanError(RuntimeError):
    def __init__(self, directory: Path, cause: OSError):
        super().__init__(f"Can't read directory {directory}: {cause}")
        self.directory = directory


def _safe_kind(classify: Classifier, path: Path) -> str:
    try:
        return classify(path) or ""
    except Exception as exc:
        LOGGER.debug("Can't classify %s: %s", path, exc)
        return ""


def _walk(root: Path, directory: Path, traverse_hidden: bool, classify: Classifier) -> List[FileInfo]:
    result: List[FileInfo] = []
    try:
        with os.scandir(directory) as entries:
            entries = list(entries)
    except OSError as exc:
        raise ScanError(directory, exc) from exc

    for entry in entries:
        path = Path(entry.path)
        if entry.is_dir():
            if (not traverse_hidden and entry.name.startswith(".")) or entry.name in RESERVED_DIRECTORIES:
                continue
            result.extend(_walk(root, path, traverse_hidden, classify))
        elif entry.is_file():
            if entry.name.startswith("."):
                continue
            try:
                size = entry.stat().st_size
            except OSError:
                size = 0
            result.append(
                FileInfo(
                    path=path.relative_to(root),
                    kind=_safe_kind(classify, path),
                    size=size,
                )
            )
    return result


def find_files(root: Path, traverse_hidden: bool = False, classify: Classifier = file_kind) -> List[FileInfo]:
    """List every regular file below ``root``, with paths relative to it.

    Raises ScanError if any directory cannot be listed; nothing is returned
    in that case. The order of the result is filesystem dependent.
    """
    root = Path(root)
    return _walk(root, root, traverse_hidden, classify)


def _path_category(path: Path) -> str:
    return symbolic_path.flatten(path.parent)


def import_records(
    directory: Path,
    catalog: Sequence[Record],
    settings: ImportSettings,
    classify: Classifier = file_kind,
) -> List[Record]:
    """Create records for allowed files that the catalog does not know yet."""
    files = find_files(directory, settings.traverse_hidden, classify)
    known = {record.file.path for record in catalog}
    path_as_category = CategoryProvider.PATH in settings.category_providers
    records: List[Record] = []

    for info in files:
        if info.path in known or info.kind not in settings.allowed_kinds:
            continue
        LOGGER.info("%s", info.path)
        record = Record(file=info)
        if path_as_category:
            category = _path_category(info.path)
            if category:
                record.categories = {category}
        records.append(record)
        known.add(info.path)

    return records


def auto_import(
    directory: Path,
    catalog: Sequence[Record],
    settings: ImportSettings,
    classify: Classifier = file_kind,
) -> List[Record]:
    records = import_records(directory, catalog, settings, classify)
    extract_metadata_from_document(directory, records, settings)
    return records


def clean_up(directory: Path, catalog: List[Record]) -> List[Record]:
    """Drop, in place, the records whose file is gone; return them."""
    directory = Path(directory)
    kept: List[Record] = []
    removed: List[Record] = []
    for record in catalog:
        if (directory / record.file.path).exists():
            kept.append(record)
        else:
            LOGGER.info("%s", record.file.path)
            removed.append(record)
    catalog[:] = kept
    return removed
