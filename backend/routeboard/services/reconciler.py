"""driver_route_order upkeep - orphan removal and backfill from client assignments"""
import structlog
from sqlalchemy.orm import Session

from routeboard.services import store

log = structlog.get_logger(__name__)


def sync_orphans(db: Session) -> int:
    """
    Delete driver_route_order rows whose (driver, client) pair no longer matches
    clients.assigned_driver_id. Safe to re-run; returns rows removed.
    """
    valid = {f"{driver_id}|{client_id}" for driver_id, client_id in store.assigned_client_pairs(db)}
    orphans = [
        (driver_id, client_id)
        for driver_id, client_id in store.all_route_order_pairs(db)
        if f"{driver_id}|{client_id}" not in valid
    ]
    for driver_id, client_id in orphans:
        store.delete_route_order(db, driver_id, client_id)
    log.info("route_order_orphans_removed", removed=len(orphans))
    return len(orphans)


def backfill_route_order(db: Session) -> int:
    """
    Add missing driver_route_order rows for every client assigned to a driver.

    Order follows the driver's stop_ids (first stop per client), then the remaining
    assigned clients by id. Positions start at 1; existing rows are left alone.
    """
    inserted = 0
    for driver in store.list_drivers(db, None):
        client_ids = store.clients_assigned_to(db, driver.id)
        if not client_ids:
            continue
        existing = {row.client_id for row in store.route_order_rows(db, driver.id)}

        ordered: list[str] = []
        for stop in _stops_in_route_order(db, driver):
            if stop.assigned_driver_id == driver.id and stop.client_id in client_ids and stop.client_id not in ordered:
                ordered.append(stop.client_id)
        ordered.extend(cid for cid in client_ids if cid not in ordered)

        added = 0
        for position, client_id in enumerate(ordered, start=1):
            if client_id in existing:
                continue
            store.upsert_route_order(db, driver.id, client_id, position)
            added += 1
        inserted += added
        log.info("route_order_backfilled", driver=driver.name, clients=len(ordered), inserted=added)
    return inserted


def _stops_in_route_order(db: Session, driver):
    stop_ids = store.decode_stop_ids(driver.stop_ids)
    by_id = {s.id: s for s in store.get_stops(db, stop_ids)}
    return [by_id[sid] for sid in stop_ids if sid in by_id]
