"""Assignment data and driver app views"""
import pytest

from routeboard.core.errors import NotFoundError, ValidationError
from routeboard.services import views


def test_assignment_data_lists_deliverable_clients(db, add_client, add_driver):
    add_client("c1", full_name="Ann Lee", assigned_driver_id="d1", service_type="Food")
    add_client("c2", paused=True, service_type="Food")
    add_client("c3", delivery=False, service_type="Food")
    add_client("c4", parent_client_id="c1", lat=1.0, lng=2.0)
    add_driver("d1", "monday", "Driver 0", color="#666")
    add_driver("d2", "monday", "Driver 1", color="#abcdef")

    data = views.assignment_data(db, "monday")

    assert [c["id"] for c in data["clients"]] == ["c1", "c4"]
    assert data["clients"][0]["assignedDriverId"] == "d1"
    assert data["clients"][0]["delivery"] is True
    assert data["drivers"] == [
        {"id": "d1", "name": "Driver 0", "color": "#1f77b4"},
        {"id": "d2", "name": "Driver 1", "color": "#abcdef"},
    ]
    stats = data["stats"]
    assert stats["total_clients"] == 4
    assert stats["total_dependants"] == 1
    assert stats["total_primaries_food"] == 3
    assert stats["primary_paused_or_delivery_off"] == 2
    assert stats["primary_food_missing_geo"] == 3
    assert stats["dependant_missing_geo"] == 0


def test_mobile_routes_counts_existing_stops(db, add_stops, add_driver):
    ids = add_stops("monday", 3)
    add_driver("d1", "monday", "Driver 0", stop_ids=ids[:2] + ["gone"])
    add_driver("d-all", "all", "Driver 1", stop_ids=ids[2:])
    add_driver("f1", "friday", "Driver 0")
    views.complete_stop(db, ids[0], True)
    db.commit()

    routes = {r["id"]: r for r in views.mobile_routes(db, "monday")}
    assert set(routes) == {"d1", "d-all"}
    assert routes["d1"]["stopIds"] == ids[:2]
    assert routes["d1"]["totalStops"] == 2
    assert routes["d1"]["completedStops"] == 1
    assert routes["d-all"]["completedStops"] == 0


def test_complete_stop_errors(db):
    with pytest.raises(ValidationError):
        views.complete_stop(db, "  ", True)
    with pytest.raises(NotFoundError):
        views.complete_stop(db, "ghost", True)
