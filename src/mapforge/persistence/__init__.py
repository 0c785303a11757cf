"""Map persistence: file format, asset resolution, async save/load and open maps."""

from .codec import (
    decode_map,
    encode_map,
    map_path_for_name,
    read_map_file,
    sanitize_filename,
    write_map_file,
)
from .errors import (
    ConcurrencyRejection,
    MapIOError,
    MapParseError,
    MapValidationError,
    PersistenceError,
    UnknownDocumentError,
)
from .gate import AsyncOperationGate, CompletedOperation
from .jobs import AsyncJobRunner, JobHandle
from .library import AssetLibrary, LibraryAsset, LibraryMetadata, LibrarySnapshot
from .materializer import SceneMaterializer
from .models import (
    AssetManifest,
    SavedAnnotations,
    SavedFogOfWar,
    SavedLine,
    SavedMap,
    SavedPath,
    SavedPlacedItem,
    SavedTextBox,
)
from .operations import LoadResult, SaveResult
from .registry import OpenMap, OpenMaps
from .resolver import PathResolver, ResolutionResult
from .store import DocumentStore

__all__ = [
    "decode_map",
    "encode_map",
    "map_path_for_name",
    "read_map_file",
    "sanitize_filename",
    "write_map_file",
    "ConcurrencyRejection",
    "MapIOError",
    "MapParseError",
    "MapValidationError",
    "PersistenceError",
    "UnknownDocumentError",
    "AsyncOperationGate",
    "CompletedOperation",
    "AsyncJobRunner",
    "JobHandle",
    "AssetLibrary",
    "LibraryAsset",
    "LibraryMetadata",
    "LibrarySnapshot",
    "SceneMaterializer",
    "AssetManifest",
    "SavedAnnotations",
    "SavedFogOfWar",
    "SavedLine",
    "SavedMap",
    "SavedPath",
    "SavedPlacedItem",
    "SavedTextBox",
    "LoadResult",
    "SaveResult",
    "OpenMap",
    "OpenMaps",
    "PathResolver",
    "ResolutionResult",
    "DocumentStore",
]
