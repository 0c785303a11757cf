"""Asset path resolution for documents saved against another library layout.

Manifest entries are resolved in priority order:

1. library-relative match: the entry is a relative path known to the library;
2. exact legacy match: the entry already is a loadable identifier;
3. suffix match: the entry ends with some library-relative path.

Anything else is missing. Suffix matching can pick the wrong file when two
folders hold files with the same relative tail; candidates are tried in
sorted order so the choice is at least stable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .library import LibrarySnapshot
from .models import SavedMap

logger = logging.getLogger(__name__)

STRATEGY_RELATIVE = "relative"
STRATEGY_EXACT = "exact"
STRATEGY_SUFFIX = "suffix"


@dataclass
class ResolutionResult:
    mapping: Dict[str, str] = field(default_factory=dict)
    missing: List[str] = field(default_factory=list)
    strategies: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.missing


class PathResolver:
    def __init__(self, snapshot: LibrarySnapshot) -> None:
        self._snapshot = snapshot
        self._suffix_candidates = sorted(snapshot.relative_to_loadable.items())

    def resolve_one(self, saved_path: str) -> Optional[Tuple[str, str]]:
        """Return ``(loadable_id, strategy)`` or None if the path is missing."""
        loadable = self._snapshot.relative_to_loadable.get(saved_path)
        if loadable is not None:
            return loadable, STRATEGY_RELATIVE
        if saved_path in self._snapshot.loadable:
            return saved_path, STRATEGY_EXACT
        for relative, loadable in self._suffix_candidates:
            if saved_path.endswith(relative):
                return loadable, STRATEGY_SUFFIX
        return None

    def resolve(self, manifest: Iterable[str]) -> ResolutionResult:
        result = ResolutionResult()
        for saved_path in manifest:
            if saved_path in result.mapping or saved_path in result.missing:
                continue
            resolved = self.resolve_one(saved_path)
            if resolved is None:
                result.missing.append(saved_path)
                continue
            result.mapping[saved_path], result.strategies[saved_path] = resolved
            logger.debug("Resolved %s -> %s (%s)", saved_path, resolved[0], resolved[1])
        if result.missing:
            logger.warning("%d manifest asset(s) could not be resolved", len(result.missing))
        return result


def apply_mapping(saved_map: SavedMap, mapping: Dict[str, str]) -> SavedMap:
    """Return a copy whose placed items use the resolved identifiers.

    Items whose path is not a mapping key are left unchanged.
    """
    items = [
        item.model_copy(update={"asset_path": mapping[item.asset_path]})
        if item.asset_path in mapping
        else item
        for item in saved_map.placed_items
    ]
    return saved_map.model_copy(update={"placed_items": items})
