"""
Bookshelf Backend - FastAPI Local Server
Serves the catalog of the configured library directory and runs imports
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from bookshelf import settings as settings_module
from bookshelf.derive import extract_metadata_from_filename
from bookshelf.library import ScanError, auto_import, clean_up, import_records
from bookshelf.metadata import METADATA_FILENAME, Record
from bookshelf.query import filter_records
from bookshelf.settings import ImportSettings, library_path, load_settings, save_settings
from bookshelf.sorting import SortMethod, sort
from bookshelf.store import load_catalog, save_catalog

LOGGER = logging.getLogger("bookshelf.api")

# ------------------------------------------------------------
# Config
# ------------------------------------------------------------
CONFIG_PATH = settings_module.CONFIG_PATH
SETTINGS = load_settings(CONFIG_PATH)

# ------------------------------------------------------------
# FastAPI app
# ------------------------------------------------------------
app = FastAPI(
    title="Bookshelf Local API",
    description="Local API server for the document catalog",
    version="0.1.0",
)

# Configure CORS for localhost only
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"http://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------
# Pydantic Schemas
# ------------------------------------------------------------
class LibraryPathRequest(BaseModel):
    path: str


class ImportResult(BaseModel):
    added: int
    removed: int
    total: int


# ------------------------------------------------------------
# Utilities
# ------------------------------------------------------------
def _library_dir() -> Path:
    directory = library_path(SETTINGS)
    if directory is None or not directory.is_dir():
        raise HTTPException(status_code=404, detail="Library path is not configured")
    return directory


def _ordered(records: List[Record], method: SortMethod, reverse: Optional[bool], q: str) -> List[dict]:
    selected = list(filter_records(records, q))
    sort(selected, method, method.reverse_order() if reverse is None else reverse)
    return [record.to_json_dict() for record in selected]


# ------------------------------------------------------------
# Routes
# ------------------------------------------------------------
@app.get("/")
async def root():
    return {"status": "ok", "service": "Bookshelf Local API", "version": "0.1.0"}


@app.get("/api/health")
async def health_check():
    directory = library_path(SETTINGS)
    library_ok = directory is not None and directory.is_dir()
    return {
        "status": "healthy" if library_ok else "degraded",
        "library_path": str(directory) if directory else None,
        "library_exists": library_ok,
    }


@app.get("/api/library")
def get_library(
    sort_by: SortMethod = Query(SortMethod.OPENED, alias="sort"),
    reverse: Optional[bool] = None,
    q: str = "",
):
    directory = _library_dir()
    records = load_catalog(directory / METADATA_FILENAME)
    return _ordered(records, sort_by, reverse, q)


@app.post("/api/library/import", response_model=ImportResult)
def run_import(auto: bool = True, clean: bool = True, filename: bool = False):
    """Scan the library directory and append the files the catalog lacks."""
    directory = _library_dir()
    catalog_path = directory / METADATA_FILENAME
    records = load_catalog(catalog_path)
    import_settings = ImportSettings.from_settings(SETTINGS)

    try:
        if auto:
            new_records = auto_import(directory, records, import_settings)
        else:
            new_records = import_records(directory, records, import_settings)
    except ScanError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    if filename:
        extract_metadata_from_filename(new_records)
    records.extend(new_records)
    removed = clean_up(directory, records) if clean else []
    save_catalog(catalog_path, records)
    LOGGER.info("Imported %d records, removed %d from %s", len(new_records), len(removed), directory)

    return {"added": len(new_records), "removed": len(removed), "total": len(records)}


@app.put("/api/library/path")
def update_library_path(req: LibraryPathRequest):
    path = Path(req.path).expanduser()
    if not path.is_dir():
        raise HTTPException(status_code=400, detail=f"Not a directory: {req.path}")
    SETTINGS["library_path"] = str(path)
    save_settings(SETTINGS, CONFIG_PATH)
    records = load_catalog(path / METADATA_FILENAME)
    return {
        "library_path": str(path),
        "items": _ordered(records, SortMethod.OPENED, None, ""),
    }


if __name__ == "__main__":
    # Run the server on localhost only for security
    uvicorn.run(
        "bookshelf.main:app",
        host=SETTINGS.get("local_api_host", "127.0.0.1"),
        port=int(SETTINGS.get("local_api_port", 5000)),
        reload=True,
        log_level="info",
    )
