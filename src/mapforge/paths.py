from __future__ import annotations

import logging
import os
from pathlib import Path

from platformdirs import PlatformDirs

LOGGER = logging.getLogger("mapforge.paths")
LOGGER.addHandler(logging.NullHandler())

APP_NAME = "mapforge"

# Environment variable overrides (useful for tests and portable installs)
ENV_CONFIG_DIR = "MAPFORGE_CONFIG_DIR"
ENV_DATA_DIR = "MAPFORGE_DATA_DIR"

CONFIG_FILE_NAME = "config.yaml"
MAPS_DIR_NAME = "maps"


class AppPaths:
    """Resolve platform-appropriate directories for the editor.

    Provides:
    - config_dir: editor configuration (config.yaml)
    - data_dir: user data; the default asset library lives under it
    - log_dir: log files

    Uses platformdirs for cross-platform correctness and honours the
    MAPFORGE_CONFIG_DIR / MAPFORGE_DATA_DIR overrides.
    """

    def __init__(self, app_name: str = APP_NAME) -> None:
        self._dirs = PlatformDirs(appname=app_name, appauthor=False)
        self._config_dir = self._compute_dir(ENV_CONFIG_DIR, Path(self._dirs.user_config_dir))
        self._data_dir = self._compute_dir(ENV_DATA_DIR, Path(self._dirs.user_data_dir))
        default_log_dir = getattr(self._dirs, "user_log_dir", None) or (self._data_dir / "logs")
        self._log_dir = Path(default_log_dir).expanduser().resolve()

    @staticmethod
    def _compute_dir(env_var: str, default: Path) -> Path:
        override = os.getenv(env_var)
        if override:
            return Path(override).expanduser().resolve()
        return Path(default).expanduser().resolve()

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    @property
    def config_file(self) -> Path:
        return self._config_dir / CONFIG_FILE_NAME

    @property
    def default_library_dir(self) -> Path:
        return self._data_dir / "library"

    def ensure_dirs(self) -> None:
        """Create all app directories if they don't exist."""
        for d in (self.config_dir, self.data_dir, self.log_dir, self.default_library_dir):
            d.mkdir(parents=True, exist_ok=True)


def maps_dir(library_root: Path) -> Path:
    """Directory holding map documents for a library: ``<library-root>/maps``."""
    return Path(library_root) / MAPS_DIR_NAME


def ensure_maps_directory(library_root: Path) -> Path:
    """Create ``<library-root>/maps`` if missing.

    Failure is logged, not raised: the editor stays usable and the error
    resurfaces as a save error if the user writes there.
    """
    target = maps_dir(library_root)
    if not target.exists():
        try:
            target.mkdir(parents=True, exist_ok=True)
            LOGGER.debug("Created maps directory %s", target)
        except OSError as exc:
            LOGGER.warning("Failed to create maps directory %s: %s", target, exc)
    return target
