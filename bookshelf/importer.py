"""
Command line importer
New files land in the staging catalog first, where they can be enriched
and reviewed before being merged into the main catalog.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from bookshelf.derive import extract_metadata_from_document, extract_metadata_from_filename
from bookshelf.library import ScanError, auto_import, clean_up, import_records
from bookshelf.metadata import IMPORTED_MD_FILENAME, METADATA_FILENAME
from bookshelf.settings import ImportSettings, load_settings
from bookshelf.sorting import SortMethod, sort
from bookshelf.store import load_catalog, save_catalog

LOGGER = logging.getLogger("bookshelf.importer")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bookshelf-import", description="Synchronize a library catalog")
    parser.add_argument("library", type=Path, help="library root directory")
    parser.add_argument("-I", "--import", dest="import_new", action="store_true",
                        help="add unknown files to the staging catalog")
    parser.add_argument("-a", "--auto-import", action="store_true",
                        help="import, then read embedded document metadata")
    parser.add_argument("-c", "--clean-up", action="store_true",
                        help="drop records whose file no longer exists")
    parser.add_argument("-e", "--extract-documents", action="store_true",
                        help="fill untitled staged records from embedded metadata")
    parser.add_argument("-f", "--extract-filenames", action="store_true",
                        help="fill untitled staged records from their file names")
    parser.add_argument("-m", "--merge", action="store_true",
                        help="move staged records into the main catalog")
    parser.add_argument("-s", "--sort", type=SortMethod, choices=list(SortMethod), metavar="METHOD",
                        help="sort the main catalog")
    parser.add_argument("--config", type=Path, default=None, help="settings file")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    directory: Path = args.library
    settings = ImportSettings.from_settings(load_settings(args.config))
    main_path = directory / METADATA_FILENAME
    staging_path = directory / IMPORTED_MD_FILENAME
    catalog = load_catalog(main_path)
    staged = load_catalog(staging_path)

    if args.clean_up:
        clean_up(directory, catalog)
        clean_up(directory, staged)

    if args.import_new or args.auto_import:
        known = catalog + staged
        try:
            if args.auto_import:
                staged.extend(auto_import(directory, known, settings))
            else:
                staged.extend(import_records(directory, known, settings))
        except ScanError as exc:
            LOGGER.error("%s", exc)
            return 1

    if args.extract_documents:
        extract_metadata_from_document(directory, staged, settings)

    if args.extract_filenames:
        extract_metadata_from_filename(staged)

    if args.merge:
        catalog.extend(staged)
        staged = []

    if args.sort is not None:
        sort(catalog, args.sort, args.sort.reverse_order())

    save_catalog(main_path, catalog)
    if staged:
        save_catalog(staging_path, staged)
    elif staging_path.exists():
        staging_path.unlink()
    return 0


if __name__ == "__main__":
    sys.exit(main())
