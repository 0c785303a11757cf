"""Background units for map save/load.

These run on the I/O thread and touch only their own inputs and the
filesystem, never the live scene. They never raise: failures come back in
the result's ``error`` string.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .codec import decode_map, encode_map, read_map_file, write_map_file
from .errors import MapIOError, MapParseError
from .models import SavedMap

logger = logging.getLogger(__name__)


@dataclass
class SaveResult:
    path: Path
    success: bool
    error: Optional[str] = None


@dataclass
class LoadResult:
    path: Path
    document: Optional[SavedMap] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.document is not None


def perform_save(path: Path, document: SavedMap) -> SaveResult:
    try:
        text = encode_map(document)
    except (TypeError, ValueError) as e:
        return SaveResult(path=path, success=False, error=f"Failed to serialize map: {e}")
    try:
        write_map_file(path, text)
    except MapIOError as e:
        return SaveResult(path=path, success=False, error=f"Failed to write file: {e}")
    logger.debug("Wrote %d bytes to %s", len(text), path)
    return SaveResult(path=path, success=True)


def perform_load(path: Path) -> LoadResult:
    try:
        document = decode_map(read_map_file(path))
    except MapIOError as e:
        return LoadResult(path=path, error=f"Failed to read file: {e}")
    except MapParseError as e:
        return LoadResult(path=path, error=f"Failed to parse map file: {e}")
    return LoadResult(path=path, document=document)
