from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from mapforge.events import EventBus, MapEvents
from mapforge.scene.live import LiveScene, SceneProvider

from .dirty import DirtyTracker, MapDirtyState
from .errors import MapValidationError
from .feedback import Feedback
from .gate import SAVE, AsyncOperationGate, CompletedOperation
from .jobs import AsyncJobRunner, JobHandle
from .library import AssetLibrary
from .materializer import SceneMaterializer
from .operations import LoadResult, SaveResult
from .registry import OpenMap, OpenMaps, name_for_path
from .resolver import PathResolver, apply_mapping

logger = logging.getLogger(__name__)


class DocumentStore:
    """Owns the open maps, the live scene binding and map I/O.

    All methods run on the interactive thread. Background work only reads
    and writes files; every scene and bookkeeping change happens in
    ``poll()`` (called from ``tick()``) or in the request methods.
    """

    def __init__(
        self,
        library: AssetLibrary,
        scene: Optional[SceneProvider] = None,
        bus: Optional[EventBus] = None,
        runner: Optional[AsyncJobRunner] = None,
    ) -> None:
        self.library = library
        self.scene: SceneProvider = scene if scene is not None else LiveScene()
        self.bus = bus or EventBus()
        self.maps = OpenMaps()
        self.gate = AsyncOperationGate(runner)
        self.materializer = SceneMaterializer(self.scene)
        self.dirty_state = MapDirtyState()
        self.tracker = DirtyTracker(self.dirty_state, self.maps)
        self.feedback = Feedback()
        self.current_path: Optional[Path] = None
        # Bumped whenever the active document changes under a pending load.
        self._epoch = 0

        self.library.ensure_maps_directory()

    # State

    @property
    def busy(self) -> bool:
        return self.gate.busy

    @property
    def status(self) -> Optional[str]:
        return self.gate.status

    @property
    def is_dirty(self) -> bool:
        return self.dirty_state.is_dirty

    def active(self) -> OpenMap:
        return self.maps.active()

    # Save

    def missing_assets(self) -> List[str]:
        """Sorted asset paths of placed items whose file no longer exists."""
        paths = {entity.item.asset_path for entity in self.scene.items()}
        return sorted(p for p in paths if not self.library.asset_exists(p))

    def request_save(self, path: Path) -> Optional[JobHandle]:
        """Save after checking placed assets still exist.

        With missing assets nothing is written; the save waits in
        ``feedback.save_warning`` until confirmed or cancelled.
        """
        missing = self.missing_assets()
        if missing:
            logger.warning("Save to %s held: %d missing asset(s)", path, len(missing))
            self.feedback.save_warning.raise_for(missing, path)
            return None
        return self.start_save(path)

    def start_save(self, path: Path) -> JobHandle:
        """Capture the scene and write it in the background.

        Raises ConcurrencyRejection if a save or load is already running.
        """
        handle = self.gate.start_save(Path(path), self.materializer.capture, context=self.maps.active_map_id)
        self.feedback.save_error.clear()
        return handle

    def confirm_pending_save(self) -> Optional[JobHandle]:
        path = self.feedback.save_warning.pending_save_path
        if path is None:
            return None
        handle = self.start_save(path)
        self.feedback.save_warning.clear()
        return handle

    def cancel_pending_save(self) -> None:
        if self.feedback.save_warning.show:
            logger.info("Pending save to %s cancelled", self.feedback.save_warning.pending_save_path)
        self.feedback.save_warning.clear()

    def _finish_save(self, result: SaveResult, map_id: int) -> None:
        if not result.success:
            logger.error("%s", result.error)
            self.feedback.save_error.message = result.error
            self.bus.publish(MapEvents.SAVE_FAILED, {"path": result.path, "error": result.error})
            return

        logger.info("Map saved to %s", result.path)
        self.feedback.save_error.clear()
        entry = self.maps.maps.get(map_id)
        if entry is None:
            logger.warning("Map %d closed before its save to %s completed", map_id, result.path)
        else:
            entry.path = result.path
            entry.name = name_for_path(result.path)
            entry.is_dirty = False
            if map_id == self.maps.active_map_id:
                self.current_path = result.path
                self.dirty_state.mark_clean(len(self.scene.items()), len(self.scene.annotations()))
        self.bus.publish(MapEvents.SAVED, {"path": result.path, "map_id": map_id})
        self.bus.publish(MapEvents.PATH_CHANGED, {"path": result.path})

    # Load

    def start_load(self, path: Path) -> JobHandle:
        """Read and parse a map in the background.

        Raises ConcurrencyRejection if a save or load is already running.
        """
        handle = self.gate.start_load(Path(path), context=self._epoch)
        self.feedback.load_error.clear()
        self.feedback.load_warning.clear()
        return handle

    def _finish_load(self, result: LoadResult, epoch: int) -> None:
        if epoch != self._epoch:
            logger.info("Discarding load of %s: active map changed while it was running", result.path)
            return

        if not result.ok:
            logger.error("%s", result.error)
            self.feedback.load_error.message = result.error
            self.bus.publish(MapEvents.LOAD_FAILED, {"path": result.path, "error": result.error})
            return

        document = result.document
        resolution = PathResolver(self.library.snapshot()).resolve(document.asset_manifest.assets)
        if not resolution.ok:
            error = MapValidationError(resolution.missing)
            logger.warning("Cannot load map %s: %s", result.path, error)
            self.feedback.load_warning.raise_for(error.missing_assets, result.path)
            self.bus.publish(
                MapEvents.LOAD_BLOCKED,
                {"path": result.path, "missing_assets": list(error.missing_assets)},
            )
            return

        document = apply_mapping(document, resolution.mapping)
        existing = self.maps.find_by_path(result.path)
        if existing is not None and existing.id != self.maps.active_map_id:
            self._stash_active()

        self.materializer.restore(document)
        self.current_path = result.path
        self.dirty_state.mark_clean(len(self.scene.items()), len(self.scene.annotations()))

        if existing is not None:
            existing.is_dirty = False
            existing.saved_state = None
            self.maps.activate(existing.id)
        else:
            self.maps.replace_active(name_for_path(result.path), result.path)
        self.scene.clear_change_trackers()

        logger.info("Map loaded from %s", result.path)
        self.bus.publish(MapEvents.LOADED, {"path": result.path, "map_id": self.maps.active_map_id})
        self.bus.publish(MapEvents.PATH_CHANGED, {"path": result.path})

    # Documents

    def new_document(self) -> OpenMap:
        """Discard the live scene and open a fresh untitled map.

        The outgoing map is not captured; callers confirm unsaved changes
        first.
        """
        self.materializer.reset_to_defaults()
        self.current_path = None
        self.dirty_state.mark_clean()
        open_map = self.maps.add()
        self._epoch += 1
        self.scene.clear_change_trackers()
        logger.info("Created new map %d", open_map.id)
        self.bus.publish(MapEvents.CREATED, {"map_id": open_map.id})
        return open_map

    def switch_document(self, target_id: int) -> OpenMap:
        """Make another open map active, keeping the current one in memory.

        Raises UnknownDocumentError (without changing anything) if
        ``target_id`` is not open.
        """
        if target_id == self.maps.active_map_id:
            return self.maps.active()
        target = self.maps.get(target_id)

        self._stash_active()
        if target.saved_state is not None:
            self.materializer.restore(target.saved_state)
            target.saved_state = None
        else:
            self.materializer.reset_to_defaults(target.name)

        self.current_path = target.path
        self.dirty_state.is_dirty = target.is_dirty
        self.maps.activate(target_id)
        self._epoch += 1
        self.scene.clear_change_trackers()
        logger.info("Switched to map: %s", target.name)
        self.bus.publish(MapEvents.SWITCHED, {"map_id": target_id})
        return target

    def _stash_active(self) -> None:
        """Capture the live scene into the active entry's snapshot."""
        # Edits from this tick not yet seen by the tracker still count.
        self._observe_changes()
        active = self.maps.active()
        active.saved_state = self.materializer.capture()
        active.is_dirty = self.dirty_state.is_dirty

    # Tick

    def poll(self) -> List[CompletedOperation]:
        completed = self.gate.poll()
        for done in completed:
            if done.kind == SAVE:
                self._finish_save(done.result, done.context)
            else:
                self._finish_load(done.result, done.context)
        return completed

    def tick(self) -> List[CompletedOperation]:
        """Once per frame: finish completed I/O, then track this tick's edits."""
        completed = self.poll()
        self._observe_changes()
        return completed

    def _observe_changes(self) -> None:
        self.tracker.observe(self.scene.changes())
        self.scene.clear_change_trackers()

    def check_last_map(self, last_map_path: Optional[Path]) -> bool:
        """Raise the startup warning if the remembered map file is gone."""
        if last_map_path is None or Path(last_map_path).exists():
            return False
        logger.warning("Last opened map no longer exists: %s", last_map_path)
        self.feedback.missing_map.show = True
        self.feedback.missing_map.path = Path(last_map_path)
        return True

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until in-flight I/O is done, then apply it. Not for the UI loop."""
        if not self.gate.wait(timeout):
            return False
        self.poll()
        return True

    def shutdown(self) -> None:
        self.gate.shutdown(wait=True)
