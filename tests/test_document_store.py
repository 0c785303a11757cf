from pathlib import Path

import pytest

from mapforge.config import EditorConfig
from mapforge.events import MapEvents
from mapforge.map import FogOfWarData, Layer, MapData
from mapforge.persistence import (
    ConcurrencyRejection,
    SavedMap,
    SavedPlacedItem,
    UnknownDocumentError,
    encode_map,
    write_map_file,
)
from mapforge.persistence.models import SavedFogOfWar
from mapforge.scene import PlacedItem, Transform


def loadable(store, relative):
    return store.library.snapshot().relative_to_loadable[relative]


def spawn(store, asset, x=0.0, layer=Layer.TOKEN):
    return store.scene.spawn_item(PlacedItem(asset, layer), Transform(x=x))


def save(store, executor, path):
    store.start_save(path)
    executor.run_pending()
    return store.tick()


def load(store, executor, path):
    store.start_load(path)
    executor.run_pending()
    return store.tick()


def write_doc(path: Path, *assets, name="Doc", fog=()):
    doc = SavedMap(
        map_data=MapData(name=name),
        placed_items=[SavedPlacedItem(asset_path=a, position=(float(i), 0.0)) for i, a in enumerate(assets)],
        fog_of_war=SavedFogOfWar(revealed_cells=list(fog)),
    )
    write_map_file(path, encode_map(doc))
    return path


@pytest.fixture
def events(store):
    seen = []
    for name in (
        MapEvents.SAVED,
        MapEvents.SAVE_FAILED,
        MapEvents.LOADED,
        MapEvents.LOAD_FAILED,
        MapEvents.LOAD_BLOCKED,
        MapEvents.CREATED,
        MapEvents.SWITCHED,
    ):
        store.bus.subscribe(name, lambda e: seen.append(e))
    return seen


def test_fresh_store(store, library_root):
    assert len(store.maps) == 1
    assert store.active().id == 0
    assert store.active().name == "Untitled Map"
    assert not store.is_dirty
    assert not store.busy
    assert (library_root / "maps").is_dir()


def test_dirty_lifecycle(store, executor, library):
    spawn(store, loadable(store, "tokens/hero.png"))
    store.tick()
    assert store.is_dirty
    assert store.active().is_dirty

    target = library.maps_dir / "Crypt Level.json"
    save(store, executor, target)
    assert not store.is_dirty
    assert store.active().path == target
    assert store.active().name == "Crypt Level"
    assert store.current_path == target

    # A tick with no edits keeps it clean
    store.tick()
    assert not store.is_dirty


def test_identical_transform_still_dirties(store, executor, library):
    eid = spawn(store, loadable(store, "tokens/hero.png"))
    save(store, executor, library.maps_dir / "a.json")
    store.scene.set_transform(eid, store.scene.get(eid).transform)
    store.tick()
    assert store.is_dirty


def test_saving_twice_is_byte_identical(store, executor, library):
    spawn(store, loadable(store, "tokens/hero.png"), x=3.0)
    spawn(store, loadable(store, "ogre.png"), x=-1.0, layer=Layer.GM)
    store.scene.fog.reveal_all((0, 0), (2, 2))
    first = library.maps_dir / "one.json"
    second = library.maps_dir / "two.json"
    save(store, executor, first)
    save(store, executor, second)
    assert first.read_bytes() == second.read_bytes()


def test_new_document_is_clean_and_discards_scene(store, events):
    spawn(store, "x.png")
    store.scene.fog.reveal_cell((1, 1))
    store.tick()

    created = store.new_document()
    store.tick()
    assert created.id == 1
    assert store.active() is created
    assert len(store.maps) == 2
    assert store.scene.item_count == 0
    assert store.scene.fog == FogOfWarData()
    assert store.current_path is None
    assert not store.is_dirty
    assert [e.name for e in events] == [MapEvents.CREATED]


def test_switch_round_trip_preserves_content_and_dirty(store, events):
    second = store.new_document()
    spawn(store, "hero.png", x=12.0)
    store.scene.map_data.grid_size = 40.0
    store.scene.fog.reveal_cell((4, 4))

    store.switch_document(0)
    store.tick()
    assert store.active().id == 0
    assert store.scene.item_count == 0
    assert not store.is_dirty
    assert second.is_dirty
    assert second.saved_state is not None

    store.switch_document(second.id)
    store.tick()
    assert store.is_dirty
    assert second.saved_state is None
    (item,) = store.scene.items()
    assert item.item.asset_path == "hero.png"
    assert item.transform.x == 12.0
    assert store.scene.map_data.grid_size == 40.0
    assert store.scene.fog.is_cell_revealed((4, 4))
    assert not store.maps.get(0).is_dirty
    assert [e.name for e in events].count(MapEvents.SWITCHED) == 2


def test_switch_to_unvisited_entry_uses_its_name(store, executor, library):
    save(store, executor, library.maps_dir / "Cave.json")
    store.new_document()
    store.maps.get(0).saved_state = None
    store.switch_document(0)
    assert store.scene.map_data.name == "Cave"
    assert store.current_path == library.maps_dir / "Cave.json"


def test_switch_to_active_is_noop(store):
    spawn(store, "a.png")
    assert store.switch_document(0) is store.active()
    assert store.scene.item_count == 1


def test_switch_to_unknown_id_changes_nothing(store):
    spawn(store, "a.png")
    with pytest.raises(UnknownDocumentError):
        store.switch_document(42)
    assert store.active().id == 0
    assert store.scene.item_count == 1


def test_load_replaces_active_entry(store, executor, library, events):
    b_path = library.maps_dir / "B.json"
    save(store, executor, b_path)
    a_path = write_doc(library.maps_dir / "A.json", "tokens/hero.png", name="Alpha", fog=[(2, 2)])

    load(store, executor, a_path)
    assert len(store.maps) == 1
    assert store.active().name == "A"
    assert store.active().path == a_path
    assert 0 not in store.maps
    assert store.scene.map_data.name == "Alpha"
    assert store.scene.fog.is_cell_revealed((2, 2))
    assert not store.is_dirty
    assert store.current_path == a_path
    assert events[-1].name == MapEvents.LOADED

    # Restoring is not an edit
    store.tick()
    assert not store.is_dirty


def test_load_resolves_library_relative_paths(store, executor, library):
    path = write_doc(library.maps_dir / "rel.json", "tokens/hero.png")
    load(store, executor, path)
    (item,) = store.scene.items()
    assert item.item.asset_path == loadable(store, "tokens/hero.png")
    assert not store.feedback.load_warning.show


def test_load_resolves_moved_library_by_suffix(store, executor, library):
    path = write_doc(library.maps_dir / "old.json", "old/location/ogre.png")
    load(store, executor, path)
    (item,) = store.scene.items()
    assert item.item.asset_path == loadable(store, "ogre.png")


def test_load_with_missing_assets_leaves_scene_untouched(store, executor, library, events):
    spawn(store, "keep.png", x=5.0)
    store.scene.map_data.name = "Current"
    store.scene.fog.reveal_cell((7, 7))
    store.tick()

    path = write_doc(library.maps_dir / "broken.json", "tokens/hero.png", "gone/missing.png", "nope.webp")
    load(store, executor, path)

    warning = store.feedback.load_warning
    assert warning.show
    assert warning.map_path == path
    assert sorted(warning.missing_assets) == ["gone/missing.png", "nope.webp"]
    assert store.scene.item_count == 1
    assert store.scene.items()[0].item.asset_path == "keep.png"
    assert store.scene.map_data.name == "Current"
    assert store.scene.fog.is_cell_revealed((7, 7))
    assert store.active().id == 0
    assert store.is_dirty
    assert events[-1].name == MapEvents.LOAD_BLOCKED


def test_load_of_open_file_switches_to_it(store, executor, library):
    hero = loadable(store, "tokens/hero.png")
    spawn(store, hero)
    p_path = library.maps_dir / "P.json"
    save(store, executor, p_path)

    other = store.new_document()
    spawn(store, "draft.png")
    load(store, executor, p_path)

    assert len(store.maps) == 2
    assert store.active().id == 0
    assert not store.active().is_dirty
    assert [e.item.asset_path for e in store.scene.items()] == [hero]
    # The outgoing map was kept, not lost
    assert other.is_dirty
    assert [i.asset_path for i in other.saved_state.placed_items] == ["draft.png"]

    store.switch_document(other.id)
    assert [e.item.asset_path for e in store.scene.items()] == ["draft.png"]


def test_load_discarded_after_new_document(store, executor, library):
    path = write_doc(library.maps_dir / "late.json", "ogre.png")
    store.start_load(path)
    new = store.new_document()
    executor.run_pending()
    store.tick()
    assert store.active() is new
    assert store.scene.item_count == 0
    assert len(store.maps) == 2
    assert not store.busy


def test_load_failure_sets_error_and_next_load_clears_it(store, executor, library, events):
    bad = library.maps_dir / "bad.json"
    bad.write_text("{nope", encoding="utf-8")
    load(store, executor, bad)
    assert store.feedback.load_error.message.startswith("Failed to parse map file")
    assert events[-1].name == MapEvents.LOAD_FAILED

    store.start_load(library.maps_dir / "missing.json")
    assert store.feedback.load_error.message is None
    executor.run_pending()
    store.tick()
    assert store.feedback.load_error.message.startswith("Failed to read file")


def test_save_failure_keeps_dirty_and_reports(store, executor, tmp_path, events):
    spawn(store, "a.png")
    store.tick()
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    save(store, executor, blocker / "map.json")
    assert store.feedback.save_error.message.startswith("Failed to write file")
    assert store.is_dirty
    assert store.active().path is None
    assert events[-1].name == MapEvents.SAVE_FAILED

    store.start_save(tmp_path / "ok.json")
    assert store.feedback.save_error.message is None


def test_save_result_applies_to_entry_that_started_it(store, executor, library):
    spawn(store, "a.png")
    store.tick()
    path = library.maps_dir / "first.json"
    store.start_save(path)
    new = store.new_document()
    executor.run_pending()
    store.tick()

    first = store.maps.get(0)
    assert first.path == path
    assert first.name == "first"
    assert not first.is_dirty
    assert store.active() is new
    assert store.current_path is None


def test_requests_while_busy_are_rejected(store, executor, library):
    store.start_save(library.maps_dir / "a.json")
    with pytest.raises(ConcurrencyRejection):
        store.start_load(library.maps_dir / "a.json")
    with pytest.raises(ConcurrencyRejection):
        store.start_save(library.maps_dir / "b.json")
    assert store.busy
    assert store.status == "Saving a.json..."
    executor.run_pending()
    store.tick()
    assert not store.busy
    assert executor.submitted == 1


def test_request_save_waits_for_confirmation_on_missing_assets(store, executor, library):
    spawn(store, loadable(store, "tokens/hero.png"))
    spawn(store, "tokens/villain.png")
    spawn(store, "tokens/villain.png")
    target = library.maps_dir / "held.json"

    assert store.request_save(target) is None
    warning = store.feedback.save_warning
    assert warning.show
    assert warning.missing_assets == ["tokens/villain.png"]
    assert warning.pending_save_path == target
    assert not store.busy

    store.confirm_pending_save()
    assert not warning.show
    executor.run_pending()
    store.tick()
    assert target.exists()


def test_cancel_pending_save(store, library):
    spawn(store, "nowhere.png")
    store.request_save(library.maps_dir / "x.json")
    store.cancel_pending_save()
    assert not store.feedback.save_warning.show
    assert store.confirm_pending_save() is None
    assert not store.busy


def test_request_save_with_all_assets_present_starts(store, executor, library):
    spawn(store, "tokens/hero.png")
    assert store.request_save(library.maps_dir / "ok.json") is not None
    assert store.busy


def test_config_follows_saved_and_loaded_paths(store, executor, library, tmp_path):
    config = EditorConfig.load(tmp_path / "config.yaml")
    config.attach(store.bus)
    path = library.maps_dir / "remember.json"
    save(store, executor, path)
    assert config.last_map_path == path
    assert config.dirty


def test_check_last_map(store, tmp_path):
    assert not store.check_last_map(None)
    assert store.check_last_map(tmp_path / "deleted.json")
    assert store.feedback.missing_map.show
    assert store.feedback.missing_map.path == tmp_path / "deleted.json"


def test_wait_idle_with_real_thread(library, tmp_path):
    from mapforge.persistence import DocumentStore

    store = DocumentStore(library)
    try:
        store.scene.spawn_item(PlacedItem("a.png"), Transform())
        store.start_save(tmp_path / "threaded.json")
        assert store.wait_idle(timeout=5)
        assert not store.busy
        assert store.active().name == "threaded"
    finally:
        store.shutdown()


def test_non_utf8_map_fails_load_and_store_recovers(store, executor, library, events):
    latin = library.maps_dir / "latin.json"
    latin.write_bytes(b'{"map_data": {"name": "Caf\xe9"}, "placed_items": []}')
    load(store, executor, latin)
    assert not store.busy
    assert store.status is None
    assert store.feedback.load_error.message.startswith("Failed to parse map file")
    assert "UTF-8" in store.feedback.load_error.message
    assert events[-1].name == MapEvents.LOAD_FAILED

    good = write_doc(library.maps_dir / "good.json", name="Good")
    load(store, executor, good)
    assert store.feedback.load_error.message is None
    assert store.current_path == good


def test_deeply_nested_json_fails_load_and_store_recovers(store, executor, library):
    deep = library.maps_dir / "deep.json"
    deep.write_text("[" * 200000 + "]" * 200000, encoding="utf-8")
    load(store, executor, deep)
    assert not store.busy
    assert store.feedback.load_error.message.startswith("Failed to parse map file")

    store.start_load(write_doc(library.maps_dir / "ok.json"))
    assert store.busy


def test_unit_that_raises_still_finishes_load(store, executor, library, monkeypatch, events):
    def broken(path):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr("mapforge.persistence.gate.perform_load", broken)
    load(store, executor, library.maps_dir / "any.json")
    assert not store.busy
    assert store.feedback.load_error.message == "Unexpected load error: disk on fire"
    assert events[-1].name == MapEvents.LOAD_FAILED


def test_unit_that_raises_still_finishes_save(store, executor, tmp_path, monkeypatch, events):
    def broken(path, document):
        raise RuntimeError("encoder bug")

    spawn(store, "a.png")
    store.tick()
    monkeypatch.setattr("mapforge.persistence.gate.perform_save", broken)
    save(store, executor, tmp_path / "x.json")
    assert not store.busy
    assert store.is_dirty
    assert store.feedback.save_error.message == "Unexpected save error: encoder bug"
    assert events[-1].name == MapEvents.SAVE_FAILED
