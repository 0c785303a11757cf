"""
mapforge core package.

Headless persistence engine for a tabletop map editor:
- Deterministic JSON map format with forward/backward compatible decoding
- Asset path resolution that heals references after a library move
- Async save/load that never blocks the interactive loop
- Multi-document registry with capture/restore and dirty tracking

Rendering and editing tools compose these services; they are not part of
this package.
"""
from importlib.metadata import version, PackageNotFoundError

__all__ = ["__version__"]

try:
    __version__ = version("mapforge")
except PackageNotFoundError:  # pragma: no cover - during tests without packaging
    __version__ = "0.0.0"
