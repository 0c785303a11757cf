from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import FrozenSet, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mapforge.paths import MAPS_DIR_NAME, ensure_maps_directory, maps_dir

logger = logging.getLogger(__name__)

LIBRARY_METADATA_FILE = ".library.json"
IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "webp", "gif", "bmp", "tiff", "tif"})


def is_image_file(path: Path) -> bool:
    return path.suffix.lower().lstrip(".") in IMAGE_EXTENSIONS


class LibraryMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field("Unnamed Library", min_length=1)


@dataclass(frozen=True)
class LibraryAsset:
    name: str
    relative_path: str  # library-relative, forward slashes
    folder_path: str  # "" for the library root
    extension: str
    full_path: Path

    @property
    def loadable_path(self) -> str:
        """Identifier handed to the renderer's loader."""
        return self.full_path.as_posix()


@dataclass(frozen=True)
class LibrarySnapshot:
    """Library identifiers frozen at resolve time.

    ``relative_to_loadable`` maps each library-relative path to the loadable
    identifier of the same file; ``loadable`` is the set of loadable ids.
    """

    relative_to_loadable: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    loadable: FrozenSet[str] = frozenset()

    @classmethod
    def from_assets(cls, assets: List[LibraryAsset]) -> "LibrarySnapshot":
        mapping = {a.relative_path: a.loadable_path for a in assets}
        return cls(
            relative_to_loadable=MappingProxyType(mapping),
            loadable=frozenset(mapping.values()),
        )


class AssetLibrary:
    """A directory of image assets plus its ``maps`` folder.

    Call ``scan()`` after the directory changes; ``snapshot()`` reflects the
    last scan.
    """

    def __init__(self, library_path: Path, scan: bool = True) -> None:
        self.library_path = Path(library_path).expanduser().resolve()
        self.assets: List[LibraryAsset] = []
        self.error: Optional[str] = None
        self.metadata = load_metadata(self.library_path)
        if scan:
            self.scan()

    @property
    def maps_dir(self) -> Path:
        return maps_dir(self.library_path)

    def ensure_maps_directory(self) -> Path:
        return ensure_maps_directory(self.library_path)

    def scan(self) -> List[LibraryAsset]:
        self.assets = []
        self.error = None
        if not self.library_path.is_dir():
            self.error = f"Library directory not found: {self.library_path}"
            logger.warning(self.error)
            return self.assets
        self._scan_dir(self.library_path)
        self.assets.sort(key=lambda a: a.relative_path)
        logger.info("Scanned %d assets from %s", len(self.assets), self.library_path)
        return self.assets

    def _scan_dir(self, current: Path) -> None:
        try:
            entries = sorted(current.iterdir())
        except OSError as e:
            logger.warning("Cannot read directory %s: %s. Some assets may not be loaded.", current, e)
            return

        for entry in entries:
            if entry.name.startswith("."):
                continue
            if entry.is_dir():
                if entry.name == MAPS_DIR_NAME and current == self.library_path:
                    continue
                self._scan_dir(entry)
                continue
            if not is_image_file(entry):
                continue
            relative = entry.relative_to(self.library_path)
            folder = relative.parent.as_posix()
            self.assets.append(
                LibraryAsset(
                    name=entry.stem,
                    relative_path=relative.as_posix(),
                    folder_path="" if folder == "." else folder,
                    extension=entry.suffix.lower().lstrip("."),
                    full_path=entry,
                )
            )

    def snapshot(self) -> LibrarySnapshot:
        return LibrarySnapshot.from_assets(self.assets)

    def asset_exists(self, identifier: str) -> bool:
        """True if the identifier names an existing file.

        Absolute identifiers are checked as-is; relative ones against the
        library root.
        """
        path = Path(identifier)
        if not path.is_absolute():
            path = self.library_path / path
        return path.is_file()

    def save_metadata(self) -> None:
        save_metadata(self.library_path, self.metadata)


def load_metadata(library_path: Path) -> LibraryMetadata:
    """Read ``.library.json``; fall back to the directory name."""
    metadata_path = Path(library_path) / LIBRARY_METADATA_FILE
    if metadata_path.exists():
        try:
            with open(metadata_path, "r", encoding="utf-8") as f:
                return LibraryMetadata.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Failed to read library metadata %s: %s", metadata_path, e)
    return LibraryMetadata(name=Path(library_path).name or "Unnamed Library")


def save_metadata(library_path: Path, metadata: LibraryMetadata) -> None:
    metadata_path = Path(library_path) / LIBRARY_METADATA_FILE
    with open(metadata_path, "w", encoding="utf-8") as f:
        json.dump(metadata.model_dump(), f, ensure_ascii=False, indent=2)
    logger.info("Saved library metadata to %s", metadata_path)
