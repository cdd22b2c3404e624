"""Route generation tests"""
import pytest

from routeboard.core.errors import ValidationError
from routeboard.core.naming import sort_by_number
from routeboard.models import Stop
from routeboard.services import store
from routeboard.services.distributor import generate_routes, split_evenly


def _assigned(db, day):
    db.expire_all()
    return {s.id: s.assigned_driver_id for s in db.query(Stop).filter(Stop.day == day)}


def test_split_evenly_gives_remainder_to_first_drivers():
    slices = split_evenly([f"s{i}" for i in range(10)], 3)
    assert [len(s) for s in slices] == [4, 3, 3]
    assert sum(slices, []) == [f"s{i}" for i in range(10)]


@pytest.mark.parametrize("total,count", [(0, 3), (1, 4), (7, 7), (23, 5), (100, 6)])
def test_split_evenly_sizes_differ_by_at_most_one(total, count):
    sizes = [len(s) for s in split_evenly(list(range(total)), count)]
    base = total // count
    assert sum(sizes) == total
    assert set(sizes) <= {base, base + 1}
    assert sizes == sorted(sizes, reverse=True)


def test_split_evenly_rejects_zero_drivers():
    with pytest.raises(ValidationError):
        split_evenly(["a"], 0)


def test_generate_assigns_contiguous_slices(db, add_stops):
    """10 stops over 3 drivers -> 4/3/3 in id order"""
    ids = add_stops("monday", 10)
    result = generate_routes(db, "Monday", 3)
    db.commit()

    drivers = sort_by_number(store.list_drivers(db, "monday"))
    assert [d.name for d in drivers] == ["Driver 0", "Driver 1", "Driver 2"]
    assert [d.sequence_number for d in drivers] == [0, 1, 2]
    assert [d.stop_ids for d in drivers] == [ids[:4], ids[4:7], ids[7:]]
    assert [d.color for d in drivers] == ["#1f77b4", "#ff7f0e", "#2ca02c"]
    assert result.day == "monday"
    assert result.drivers_created == 3
    assert result.stops_assigned == 10

    owner = {sid: d.id for d in drivers for sid in d.stop_ids}
    assert _assigned(db, "monday") == owner


def test_generate_records_run_snapshot(db, add_stops):
    ids = add_stops("tuesday", 3)
    result = generate_routes(db, "tuesday", 2)
    db.commit()

    run = store.get_run(db, result.run_id)
    assert run.day == "tuesday"
    assert [e["driverName"] for e in run.snapshot] == ["Driver 0", "Driver 1"]
    assert [e["stopIds"] for e in run.snapshot] == [ids[:2], ids[2:]]


def test_generate_reuses_drivers_and_empties_the_rest(db, add_stops, add_driver):
    ids = add_stops("monday", 4)
    add_driver("d-a", "monday", "Driver 0", stop_ids=ids[:2])
    add_driver("d-b", "monday", "Driver 1", stop_ids=ids[2:])
    add_driver("d-c", "monday", "Driver 5")

    generate_routes(db, "monday", 1)
    db.commit()
    db.expire_all()

    drivers = {d.id: d for d in store.list_drivers(db, "monday")}
    assert set(drivers) == {"d-a", "d-b", "d-c"}
    assert drivers["d-a"].stop_ids == ids
    assert drivers["d-b"].stop_ids == []
    assert drivers["d-c"].stop_ids == []
    assert set(_assigned(db, "monday").values()) == {"d-a"}


def test_generate_renumbers_reused_drivers(db, add_stops, add_driver):
    add_stops("monday", 2)
    add_driver("d-x", "monday", "Driver 3")
    add_driver("d-y", "monday", "Driver 1")

    generate_routes(db, "monday", 2)
    db.commit()
    db.expire_all()

    assert store.get_driver(db, "d-y").name == "Driver 0"
    assert store.get_driver(db, "d-x").name == "Driver 1"


def test_generate_leaves_other_days_alone(db, add_stops, add_driver):
    add_stops("monday", 2)
    friday = add_stops("friday", 2, prefix="f")
    add_driver("d-f", "friday", "Driver 0", stop_ids=friday)

    generate_routes(db, "monday", 2)
    db.commit()

    assert store.get_driver(db, "d-f").stop_ids == friday
    assert set(_assigned(db, "friday").values()) == {"d-f"}


def test_generate_with_no_stops_creates_empty_routes(db):
    result = generate_routes(db, "sunday", 2)
    db.commit()
    assert result.stops_assigned == 0
    assert [d.stop_ids for d in store.list_drivers(db, "sunday")] == [[], []]


@pytest.mark.parametrize("count", [0, -1, True, "3"])
def test_generate_rejects_invalid_count(db, count):
    with pytest.raises(ValidationError):
        generate_routes(db, "monday", count)
