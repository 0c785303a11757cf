from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

ENV_LOG_LEVEL = "MAPFORGE_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
LOG_FILE_NAME = "mapforge.log"


def resolve_level(default_level: int = logging.INFO) -> int:
    """Level named by MAPFORGE_LOG_LEVEL, or ``default_level`` if unset/unknown."""
    name = os.getenv(ENV_LOG_LEVEL, "").strip().upper()
    level = logging.getLevelName(name) if name else default_level
    return level if isinstance(level, int) else default_level


def configure_logging(default_level: int = logging.INFO, log_dir: Optional[Path] = None) -> None:
    """Set up the root logger for an editor session.

    Console output always; with ``log_dir`` also a ``mapforge.log`` file
    there, so save/load failures can be inspected after the fact. Does
    nothing if the root logger already has handlers.
    """
    if logging.getLogger().handlers:
        return
    handlers = [logging.StreamHandler()]
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8"))
    logging.basicConfig(level=resolve_level(default_level), format=LOG_FORMAT, handlers=handlers)
