from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import EditorConfig
from .logging_config import configure_logging
from .paths import AppPaths
from .persistence.jobs import AsyncJobRunner
from .persistence.library import AssetLibrary
from .persistence.store import DocumentStore

logger = logging.getLogger(__name__)


@dataclass
class EditorSession:
    config: EditorConfig
    store: DocumentStore

    def close(self) -> None:
        """Finish in-flight I/O, then persist config changes."""
        self.store.wait_idle()
        self.store.shutdown()
        self.config.save_if_dirty()


def open_session(
    config_path: Optional[Path] = None,
    library_path: Optional[Path] = None,
    debug: bool = False,
    log_to_file: bool = True,
    runner: Optional[AsyncJobRunner] = None,
) -> EditorSession:
    """Startup wiring for an embedding editor.

    Library choice: ``library_path``, else the configured default, else
    ``<data_dir>/library``. The last map is remembered but never loaded;
    if it is gone the store raises its missing-map warning.
    """
    paths = AppPaths()
    configure_logging(logging.DEBUG if debug else logging.INFO, log_dir=paths.log_dir if log_to_file else None)

    config = EditorConfig.load(config_path)
    root = Path(library_path or config.default_library_path or paths.default_library_dir)
    root.mkdir(parents=True, exist_ok=True)
    config.add_recent_library(root)

    store = DocumentStore(AssetLibrary(root), runner=runner)
    config.attach(store.bus)
    store.check_last_map(config.last_map_path)
    logger.info("Editor session ready (library %s)", root)
    return EditorSession(config=config, store=store)
