"""driver_route_order orphan sync and backfill"""
from routeboard.models import DriverRouteOrder, Stop
from routeboard.services import reconciler, store


def test_sync_orphans_removes_stale_rows(db, add_client, add_route_order):
    add_client("c1", assigned_driver_id="d1")
    add_client("c2", assigned_driver_id="d2")
    add_route_order("d1", "c1", 1)
    add_route_order("d1", "c2", 2)
    add_route_order("d9", "c3", 1)

    assert reconciler.sync_orphans(db) == 2
    db.commit()
    assert store.all_route_order_pairs(db) == [("d1", "c1")]


def test_sync_orphans_is_idempotent(db, add_client, add_route_order):
    add_client("c1", assigned_driver_id="d1")
    add_route_order("d1", "c1", 1)
    add_route_order("d2", "c1", 1)

    assert reconciler.sync_orphans(db) == 1
    db.commit()
    assert reconciler.sync_orphans(db) == 0


def test_backfill_follows_stop_order(db, add_client, add_driver):
    for cid in ("ca", "cb", "cc"):
        add_client(cid, assigned_driver_id="d1")
    db.add_all([
        Stop(id="s1", day="monday", client_id="cb", assigned_driver_id="d1"),
        Stop(id="s2", day="monday", client_id="ca", assigned_driver_id="d1"),
    ])
    db.commit()
    add_driver("d1", "monday", "Driver 0", stop_ids=["s1", "s2"])

    assert reconciler.backfill_route_order(db) == 3
    db.commit()
    rows = store.route_order_rows(db, "d1")
    assert [(r.client_id, r.position) for r in rows] == [("cb", 1), ("ca", 2), ("cc", 3)]


def test_backfill_keeps_existing_rows(db, add_client, add_driver, add_route_order):
    add_client("ca", assigned_driver_id="d1")
    add_client("cb", assigned_driver_id="d1")
    add_driver("d1", "monday", "Driver 0")
    add_route_order("d1", "ca", 9)

    assert reconciler.backfill_route_order(db) == 1
    db.commit()
    assert db.get(DriverRouteOrder, ("d1", "ca")).position == 9
    assert db.get(DriverRouteOrder, ("d1", "cb")).position == 2
