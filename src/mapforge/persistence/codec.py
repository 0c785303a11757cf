from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from .errors import MapIOError, MapParseError
from .models import SavedMap

logger = logging.getLogger(__name__)

MAP_FILE_SUFFIX = ".json"


def encode_map(saved_map: SavedMap) -> str:
    """Encode a map to pretty-printed JSON.

    The asset manifest is rebuilt from the placed items, keys are sorted and
    fog cells are sorted, so the same map always encodes to the same bytes.
    """
    data = saved_map.with_rebuilt_manifest().model_dump(mode="json")
    return json.dumps(data, ensure_ascii=False, sort_keys=True, indent=2)


def decode_map(text: str) -> SavedMap:
    """Decode JSON text into a SavedMap, filling defaults for absent sections."""
    try:
        data: Dict[str, Any] = json.loads(text)
    except json.JSONDecodeError as e:
        raise MapParseError(f"Invalid JSON: {e}") from e
    except RecursionError as e:
        raise MapParseError("Invalid JSON: nesting too deep") from e

    if not isinstance(data, dict):
        raise MapParseError("Map file malformed: root is not an object")

    try:
        return SavedMap.model_validate(data)
    except ValidationError as e:
        raise MapParseError(f"Map file does not match the map schema: {e}") from e


def write_map_file(path: Path, text: str) -> None:
    """Write map text atomically.

    Writes to ``<path>.tmp``, flushes and fsyncs, then replaces the target so
    a crash never leaves a half-written map behind. Raises MapIOError.
    """
    path = Path(path)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Writing map to temporary file: %s", tmp_path)
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        raise MapIOError(f"{path}: {e}") from e


def read_map_file(path: Path) -> str:
    """Read map text. Raises MapIOError, or MapParseError if not UTF-8."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise MapParseError(f"{path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise MapIOError(f"{path}: {e}") from e


def sanitize_filename(name: str) -> str:
    """Replace anything but alphanumerics, '-', '_' and ' ' with '_'."""
    cleaned = "".join(c if (c.isalnum() or c in "-_ ") else "_" for c in name)
    return cleaned.strip()


def map_path_for_name(maps_dir: Path, name: str) -> Path:
    """File path for a map named by the user: ``<maps_dir>/<sanitized>.json``."""
    filename = sanitize_filename(name) or "map"
    return Path(maps_dir) / f"{filename}{MAP_FILE_SUFFIX}"
