"""Route run save / apply tests"""
import json
from datetime import datetime, timedelta, timezone

import pytest

from routeboard.core.errors import NotFoundError, ValidationError
from routeboard.models import RouteRun, Stop
from routeboard.services import editor, snapshots, store
from routeboard.services.distributor import generate_routes


def _lists(db, day):
    db.expire_all()
    return {d.id: d.stop_ids for d in store.list_drivers(db, day)}


def test_save_without_run_inserts_then_updates(db, add_stops, add_driver):
    ids = add_stops("monday", 2)
    add_driver("d-a", "monday", "Driver 0", stop_ids=ids)

    first = snapshots.save_current_state(db, "monday")
    db.commit()
    assert first.created
    assert first.message == "Route run saved"

    second = snapshots.save_current_state(db, "monday")
    db.commit()
    assert not second.created
    assert second.id == first.id
    assert second.message == "Route run updated"
    assert len(store.recent_runs(db, "monday", 10)) == 1


def test_save_as_new_always_inserts(db, add_driver):
    add_driver("d-a", "monday", "Driver 0")
    a = snapshots.save_current_state(db, "monday", as_new=True)
    b = snapshots.save_current_state(db, "monday", as_new=True)
    db.commit()
    assert a.id != b.id
    assert len(store.recent_runs(db, "monday", 10)) == 2


def test_save_with_run_of_another_day_changes_nothing(db, add_driver):
    add_driver("d-a", "monday", "Driver 0", stop_ids=[])
    store.insert_run(db, "friday", [], run_id="run-f")
    db.commit()

    result = snapshots.save_current_state(db, "monday", run_id="run-f")
    db.commit()
    assert result.id == "run-f"
    assert result.message == "Route run updated"
    assert store.get_run(db, "run-f").snapshot == []


def test_save_then_apply_restores_assignment(db, add_stops):
    ids = add_stops("monday", 4)
    generate_routes(db, "monday", 2)
    saved = snapshots.save_current_state(db, "monday", as_new=True)
    db.commit()
    before = _lists(db, "monday")

    drivers = store.list_drivers(db, "monday")
    target = next(d for d in drivers if ids[0] not in d.stop_ids)
    editor.reassign_stop(db, "monday", ids[0], target.id)
    db.commit()
    assert _lists(db, "monday") != before

    result = snapshots.apply_run(db, saved.id)
    db.commit()
    assert result.drivers_updated == 2
    after = _lists(db, "monday")
    assert after == before
    owner = {sid: did for did, sids in after.items() for sid in sids}
    db.expire_all()
    assert {s.id: s.assigned_driver_id for s in db.query(Stop)} == owner


def test_apply_empties_unlisted_drivers_and_unassigns_their_stops(db, add_stops, add_driver):
    ids = add_stops("monday", 3)
    add_driver("d-a", "monday", "Driver 0", stop_ids=ids[:1])
    add_driver("d-b", "monday", "Driver 1", stop_ids=ids[1:])
    store.insert_run(
        db,
        "monday",
        [{"driverId": "d-a", "driverName": "Driver 0", "color": "#1f77b4", "stopIds": ids[:2]}],
        run_id="run-1",
    )
    db.commit()

    snapshots.apply_run(db, "run-1")
    db.commit()

    assert _lists(db, "monday") == {"d-a": ids[:2], "d-b": []}
    assigned = {s.id: s.assigned_driver_id for s in db.query(Stop)}
    assert assigned == {ids[0]: "d-a", ids[1]: "d-a", ids[2]: None}


def test_apply_creates_missing_drivers(db):
    store.insert_run(
        db,
        "monday",
        [
            {"driverId": "new-1", "driverName": "Driver 7", "color": None, "stopIds": []},
            {"driverName": "no id"},
            "junk",
        ],
        run_id="run-1",
    )
    db.commit()

    result = snapshots.apply_run(db, "run-1")
    db.commit()
    driver = store.get_driver(db, "new-1", "monday")
    assert driver.name == "Driver 7"
    assert driver.sequence_number == 7
    assert result.drivers_updated == 3


def test_apply_accepts_snapshot_stored_as_text(db, add_stops):
    ids = add_stops("monday", 1)
    text = json.dumps([{"driverId": "d-t", "driverName": "Driver 0", "stopIds": ids}])
    store.insert_run(db, "monday", text, run_id="run-t")
    db.commit()

    snapshots.apply_run(db, "run-t")
    db.commit()
    assert _lists(db, "monday") == {"d-t": ids}


def test_apply_rejects_non_list_snapshot(db):
    store.insert_run(db, "monday", {"driverId": "x"}, run_id="run-bad")
    db.commit()
    with pytest.raises(ValidationError, match="Invalid snapshot format"):
        snapshots.apply_run(db, "run-bad")


def test_apply_unknown_or_missing_run(db):
    with pytest.raises(NotFoundError):
        snapshots.apply_run(db, "nope")
    with pytest.raises(ValidationError):
        snapshots.apply_run(db, None)


def test_list_runs_newest_first(db):
    now = datetime.now(timezone.utc)
    for i in range(3):
        db.add(RouteRun(id=f"r{i}", day="monday", snapshot=[], created_at=now + timedelta(minutes=i)))
    db.add(RouteRun(id="other", day="friday", snapshot=[], created_at=now))
    db.commit()

    runs = snapshots.list_runs(db, "monday", limit=2)
    assert [r["id"] for r in runs] == ["r2", "r1"]
    assert all(r["createdAt"] for r in runs)
