import json
from pathlib import Path

from mapforge.persistence import AssetLibrary
from mapforge.persistence.library import LIBRARY_METADATA_FILE, LibraryMetadata, load_metadata

from conftest import PNG_BYTES, make_library


def test_scan_finds_images_recursively(library: AssetLibrary, library_root: Path):
    rel = [a.relative_path for a in library.assets]
    assert rel == ["ogre.png", "terrain/floor.png", "tokens/hero.png"]
    hero = next(a for a in library.assets if a.name == "hero")
    assert hero.folder_path == "tokens"
    assert hero.extension == "png"
    assert hero.loadable_path == (library_root.resolve() / "tokens" / "hero.png").as_posix()


def test_scan_skips_hidden_maps_and_non_images(tmp_path: Path):
    root = make_library(tmp_path, files=("a.PNG", "b.webp", "notes.txt"))
    (root / ".hidden").mkdir()
    (root / ".hidden" / "secret.png").write_bytes(PNG_BYTES)
    (root / ".dot.png").write_bytes(PNG_BYTES)
    (root / "maps").mkdir()
    (root / "maps" / "thumb.png").write_bytes(PNG_BYTES)

    lib = AssetLibrary(root)
    assert sorted(a.relative_path for a in lib.assets) == ["a.PNG", "b.webp"]
    assert {a.extension for a in lib.assets} == {"png", "webp"}


def test_missing_library_sets_error(tmp_path: Path):
    lib = AssetLibrary(tmp_path / "gone")
    assert lib.assets == []
    assert "not found" in lib.error


def test_snapshot_maps_relative_to_loadable(library: AssetLibrary):
    snap = library.snapshot()
    assert snap.relative_to_loadable["tokens/hero.png"].endswith("/lib/tokens/hero.png")
    assert snap.relative_to_loadable["ogre.png"] in snap.loadable
    assert len(snap.loadable) == 3


def test_asset_exists_accepts_relative_and_loadable(library: AssetLibrary):
    assert library.asset_exists("tokens/hero.png")
    assert library.asset_exists(library.snapshot().relative_to_loadable["tokens/hero.png"])
    assert not library.asset_exists("tokens/villain.png")


def test_maps_directory(library: AssetLibrary):
    target = library.ensure_maps_directory()
    assert target == library.library_path / "maps"
    assert target.is_dir()


def test_metadata_roundtrip_and_fallback(tmp_path: Path):
    root = tmp_path / "Dungeon Tiles"
    root.mkdir()
    assert load_metadata(root).name == "Dungeon Tiles"

    lib = AssetLibrary(root)
    lib.metadata = LibraryMetadata(name="My Tiles")
    lib.save_metadata()
    assert json.loads((root / LIBRARY_METADATA_FILE).read_text())["name"] == "My Tiles"
    assert AssetLibrary(root).metadata.name == "My Tiles"


def test_corrupt_metadata_falls_back_to_directory_name(tmp_path: Path):
    root = tmp_path / "tiles"
    root.mkdir()
    (root / LIBRARY_METADATA_FILE).write_text("{broken")
    assert load_metadata(root).name == "tiles"
