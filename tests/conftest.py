import sys
from concurrent.futures import Executor, Future
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from mapforge.persistence import AssetLibrary, AsyncJobRunner, DocumentStore  # noqa: E402
from mapforge.scene import LiveScene  # noqa: E402

PNG_BYTES = b"\x89PNG\r\n\x1a\n"


class ManualExecutor(Executor):
    """Executor that runs submitted work only when the test says so."""

    def __init__(self):
        self.pending = []
        self.submitted = 0

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.pending.append((future, fn, args, kwargs))
        self.submitted += 1
        return future

    def run_pending(self):
        while self.pending:
            future, fn, args, kwargs = self.pending.pop(0)
            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(fn(*args, **kwargs))
            except Exception as e:
                future.set_exception(e)

    def shutdown(self, wait=True, **kwargs):
        self.run_pending()


def make_library(root: Path, files=("tokens/hero.png", "terrain/floor.png", "ogre.png")) -> Path:
    for rel in files:
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(PNG_BYTES)
    return root


@pytest.fixture
def library_root(tmp_path: Path) -> Path:
    return make_library(tmp_path / "lib")


@pytest.fixture
def library(library_root: Path) -> AssetLibrary:
    return AssetLibrary(library_root)


@pytest.fixture
def executor() -> ManualExecutor:
    return ManualExecutor()


@pytest.fixture
def store(library: AssetLibrary, executor: ManualExecutor) -> DocumentStore:
    return DocumentStore(library, scene=LiveScene(), runner=AsyncJobRunner(executor))
