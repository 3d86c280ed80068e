from __future__ import annotations

import pytest

from photo_studio.media.pending_store import (
    CapacityError,
    PendingResourceStore,
    ReorderRangeError,
)
from photo_studio.media.preview import PreviewRegistry, ReleasedHandleError


@pytest.fixture
def store() -> PendingResourceStore:
    return PendingResourceStore(max_items=4, registry=PreviewRegistry(max_edge=16))


def test_add_allocates_one_preview_per_item(store, make_png) -> None:
    first = store.add(make_png((255, 0, 0)))
    second = store.add(make_png((0, 255, 0)), "custom-id", filename="green.png")

    assert [item.id for item in store.items] == [first, "custom-id"]
    assert store.registry.live_count == 2
    assert store.get("custom-id").filename == "green.png"
    assert store.get("custom-id").content_type == "image/png"


def test_preview_is_a_thumbnail_of_the_raw_bytes(store, make_png) -> None:
    raw = make_png(size=(200, 100))
    item_id = store.add(raw)
    item = store.get(item_id)

    assert item.raw_bytes == raw
    preview = store.registry.read(item.preview)
    assert preview != raw
    assert preview.startswith(b"\x89PNG")


def test_live_handles_track_pending_items_through_add_and_remove(store, make_png) -> None:
    ids = [store.add(make_png()) for _ in range(3)]
    store.remove(ids[1])
    assert store.registry.live_count == store.pending_count == 2

    store.add(make_png())
    store.remove(ids[0])
    store.remove("missing")
    assert store.registry.live_count == store.pending_count == 2


def test_remove_unknown_id_is_a_no_op(store, make_png) -> None:
    store.add(make_png(), "a")
    store.remove("b")
    store.remove("a")
    store.remove("a")
    assert store.pending_count == 0
    assert store.registry.live_count == 0


def test_removed_handle_cannot_be_read(store, make_png) -> None:
    item_id = store.add(make_png())
    handle = store.get(item_id).preview
    store.remove(item_id)

    with pytest.raises(ReleasedHandleError):
        store.registry.read(handle)
    with pytest.raises(ReleasedHandleError):
        store.registry.release(handle)


def test_add_at_capacity_raises_without_mutation(store, make_png) -> None:
    store.mirror_committed(["https://cdn.example.com/1.png"])
    for _ in range(3):
        store.add(make_png())

    with pytest.raises(CapacityError) as excinfo:
        store.add(make_png())

    assert excinfo.value.limit == 4
    assert store.pending_count == 3
    assert store.registry.live_count == 3


def test_add_respects_caller_committed_count(store, make_png) -> None:
    with pytest.raises(CapacityError):
        store.add(make_png(), committed_count=4)
    assert store.pending_count == 0
    assert store.registry.live_count == 0


def test_add_rejects_non_image_and_duplicate_ids(store, make_png) -> None:
    with pytest.raises(ValueError):
        store.add(b"not an image")
    store.add(make_png(), "dup")
    with pytest.raises(ValueError):
        store.add(make_png(), "dup")
    assert store.registry.live_count == 1


def test_reorder_is_a_positional_move(store, make_png) -> None:
    for name in ("a", "b", "c", "d"):
        store.add(make_png(), name)

    store.reorder(0, 2)
    assert [item.id for item in store.items] == ["b", "c", "a", "d"]

    store.reorder(3, 0)
    assert [item.id for item in store.items] == ["d", "b", "c", "a"]


def test_reorder_same_index_is_a_no_op(store, make_png) -> None:
    for name in ("a", "b", "c"):
        store.add(make_png(), name)
    for index in range(3):
        store.reorder(index, index)
    assert [item.id for item in store.items] == ["a", "b", "c"]


@pytest.mark.parametrize("from_index,to_index", [(-1, 0), (0, 2), (5, 1)])
def test_reorder_out_of_range_raises(store, make_png, from_index, to_index) -> None:
    store.add(make_png(), "a")
    store.add(make_png(), "b")

    with pytest.raises(ReorderRangeError):
        store.reorder(from_index, to_index)
    assert [item.id for item in store.items] == ["a", "b"]


def test_clear_twice_releases_each_handle_once(store, make_png) -> None:
    for _ in range(3):
        store.add(make_png())
    store.mirror_committed(["ref-1"])

    store.clear()
    assert store.pending_count == 0
    assert store.registry.live_count == 0

    store.clear()
    assert store.registry.live_count == 0
    assert store.committed == ("ref-1",)


def test_reset_drops_committed_mirror(store, make_png) -> None:
    store.add(make_png())
    store.add_committed("ref-1")
    store.add_committed("ref-2")
    store.remove_committed("ref-1")
    assert store.committed == ("ref-2",)

    store.reset()
    store.reset()
    assert store.committed == ()
    assert store.pending_count == 0
    assert store.registry.live_count == 0


def test_context_manager_tears_down_session(make_png) -> None:
    registry = PreviewRegistry()
    with PendingResourceStore(max_items=2, registry=registry) as session:
        session.add(make_png())
        session.add(make_png())
        assert registry.live_count == 2
    assert registry.live_count == 0


def test_raw_payloads_follow_pending_order(store, make_png) -> None:
    red, blue = make_png((255, 0, 0)), make_png((0, 0, 255))
    store.add(red, "r")
    store.add(blue, "b")
    store.reorder(1, 0)
    assert store.raw_payloads() == [blue, red]


def test_defaults_follow_studio_settings(monkeypatch, make_png) -> None:
    from io import BytesIO

    from PIL import Image

    monkeypatch.setenv("STUDIO_MAX_IMAGES", "2")
    monkeypatch.setenv("STUDIO_PREVIEW_MAX_EDGE", "32")

    store = PendingResourceStore()
    first = store.add(make_png(size=(200, 100)))
    store.add(make_png())

    assert store.max_items == 2
    with pytest.raises(CapacityError):
        store.add(make_png())
    assert store.pending_count == 2

    preview = Image.open(BytesIO(store.registry.read(store.get(first).preview)))
    assert max(preview.size) == 32
