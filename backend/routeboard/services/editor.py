"""Route editing - reorder, reverse, rename, reset, reassignment and route optimisation"""
from datetime import date
from typing import NamedTuple

import structlog
from sqlalchemy.orm import Session

from routeboard.core.errors import ConflictError, NotFoundError, ValidationError
from routeboard.core.geo import has_coords, nearest_neighbour_order
from routeboard.core.naming import (
    driver_name,
    driver_number,
    is_hex_color,
    normalize_day,
    palette_color,
    sort_by_number,
)
from routeboard.models import Driver, DriverRouteOrder, Stop
from routeboard.services import snapshots, store

log = structlog.get_logger(__name__)


class RenameResult(NamedTuple):
    old_name: str
    new_name: str


class ReverseResult(NamedTuple):
    stops: int
    clients: int


class AddDriverResult(NamedTuple):
    driver: Driver
    run_id: str


def _non_negative_int(value, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{field} must be a non-negative integer")
    return value


def _require_driver(db: Session, driver_id: str, day: str | None = None) -> Driver:
    driver = store.get_driver(db, driver_id, day)
    if driver is None:
        raise NotFoundError("Driver not found")
    return driver


# --- per-client route order ---


def reorder_within_route(db: Session, driver_id: str, client_id: str, new_position) -> DriverRouteOrder:
    """Move a client to new_position in the driver's route. Other clients may share the position."""
    if not driver_id or not client_id or new_position is None:
        raise ValidationError("driver_id, client_id, and new_position are required")
    position = _non_negative_int(new_position, "new_position")
    row = store.upsert_route_order(db, str(driver_id), str(client_id), position)
    log.info("route_reordered", driver_id=driver_id, client_id=client_id, position=position)
    return row


def route_order(db: Session, driver_id: str) -> list[DriverRouteOrder]:
    return store.route_order_rows(db, driver_id)


def reverse_route(db: Session, driver_id: str) -> ReverseResult:
    """Reverse the driver's stop order and its client order, if any."""
    if not driver_id:
        raise ValidationError("Missing routeId")
    driver = _require_driver(db, str(driver_id))
    stop_ids = store.decode_stop_ids(driver.stop_ids)
    if stop_ids:
        store.set_driver_stops(db, driver, list(reversed(stop_ids)))

    rows = store.route_order_rows(db, driver.id)
    for position, row in enumerate(reversed(rows)):
        row.position = position
    if rows:
        store.flush(db)

    log.info("route_reversed", driver_id=driver.id, stops=len(stop_ids), clients=len(rows))
    return ReverseResult(stops=len(stop_ids), clients=len(rows))


# --- driver roster ---


def rename_driver(db: Session, driver_id: str, new_number) -> RenameResult:
    """Renumber a driver. Driver 0 is reserved and numbers are unique per day."""
    if not driver_id:
        raise ValidationError("driverId is required")
    if new_number is None:
        raise ValidationError("newNumber is required")
    number = _non_negative_int(new_number, "newNumber")

    driver = _require_driver(db, str(driver_id))
    old_name = driver.name or "Unknown"
    if driver_number(driver) == 0 and number != 0:
        raise ValidationError("Cannot rename Driver 0 to a different number")

    new_name = driver_name(number)
    for other in store.list_drivers(db, driver.day or "all"):
        if other.id == driver.id:
            continue
        if driver_number(other) == number or other.name == new_name:
            raise ConflictError(f"{new_name} already exists")

    driver.name = new_name
    driver.sequence_number = number
    store.flush(db)
    log.info("driver_renamed", driver_id=driver.id, old_name=old_name, new_name=new_name)
    return RenameResult(old_name, new_name)


def add_driver(db: Session, day: str | None) -> AddDriverResult:
    """Add the next numbered driver (Driver 0 first if the day has none) and record a route run."""
    day = normalize_day(day)
    existing = store.list_drivers(db, day)
    numbers = [n for n in (driver_number(d) for d in existing) if n is not None]
    number = 0 if 0 not in numbers else max([n for n in numbers if n != 0], default=0) + 1

    driver = store.create_driver(db, day, driver_name(number), palette_color(number), sequence_number=number)
    drivers = sort_by_number(existing + [driver])
    run = store.insert_run(db, day, snapshots.build_snapshot(drivers))
    log.info("driver_added", day=day, driver_id=driver.id, name=driver.name, run_id=run.id)
    return AddDriverResult(driver, run.id)


def set_driver_color(db: Session, driver_id: str, color: str | None) -> str:
    if not driver_id:
        raise ValidationError("driverId is required")
    color = str(color).strip() if color is not None else ""
    if not color:
        raise ValidationError("color is required")
    if not is_hex_color(color):
        raise ValidationError("color must be a valid hex color (e.g. #1f77b4 or #f00)")
    driver = _require_driver(db, str(driver_id))
    driver.color = color
    store.flush(db)
    return color


def reset_driver(db: Session, driver_id: str, day: str | None, clear_proof: bool = False) -> int:
    """Empty the driver's route and unassign its stops. clear_proof also undoes completion."""
    if not driver_id:
        raise ValidationError("driverId is required")
    day = normalize_day(day)
    driver = _require_driver(db, str(driver_id), day)
    stop_ids = store.decode_stop_ids(driver.stop_ids)

    store.set_driver_stops(db, driver, [])
    store.unassign_stops(db, stop_ids, clear_proof=clear_proof)
    store.unassign_stops_of_drivers(db, [driver.id])
    log.info("driver_reset", driver_id=driver.id, day=day, stops=len(stop_ids), clear_proof=clear_proof)
    return len(stop_ids)


def apply_driver_snapshot_slice(db: Session, run_id) -> int:
    """Apply the driver list of one run to its day. Returns the drivers applied."""
    run, entries = snapshots.load_run(db, run_id)
    applied = snapshots.apply_snapshot(db, run.day or "all", entries)
    log.info("route_run_slice_applied", run_id=run.id, day=run.day, drivers=applied)
    return applied


# --- manual reassignment ---


def _move_stop(db: Session, stop: Stop, target: Driver | None) -> None:
    """Take the stop off every other route of its day and append it once to the target's route."""
    for driver in store.list_drivers(db, stop.day):
        if target is not None and driver.id == target.id:
            continue
        ids = store.decode_stop_ids(driver.stop_ids)
        kept = [sid for sid in ids if sid != stop.id]
        if kept != ids:
            store.set_driver_stops(db, driver, kept)
    if target is not None:
        ids = store.decode_stop_ids(target.stop_ids)
        if stop.id not in ids:
            store.set_driver_stops(db, target, ids + [stop.id])
    stop.assigned_driver_id = target.id if target is not None else None
    store.flush(db)


def reassign_stop(db: Session, day: str | None, stop_id: str, to_driver_id: str) -> Stop:
    if not to_driver_id or not stop_id:
        raise ValidationError("Invalid payload")
    day = normalize_day(day)
    stop = store.get_stop(db, str(stop_id), day)
    if stop is None:
        raise NotFoundError("Stop not found for this day")
    target = store.get_driver(db, str(to_driver_id), day)
    if target is None:
        raise NotFoundError("Target driver not found")
    _move_stop(db, stop, target)
    log.info("stop_reassigned", stop_id=stop.id, driver_id=to_driver_id, day=day)
    return stop


def assign_client_driver(
    db: Session,
    client_id: str,
    driver_id: str | None,
    day: str | None,
    delivery_date: date | None = None,
) -> int:
    """
    Set the client's driver and move the client's matching stops with it. Returns stops updated.

    The target must be a driver of the given day; with day "all" any driver is accepted
    and only stops of that driver's day move. A missing driver_id unassigns the client.
    """
    if not client_id:
        raise ValidationError("clientId is required")
    if not day:
        raise ValidationError("day is required")
    day = normalize_day(day)
    client = store.get_client(db, str(client_id))
    if client is None:
        raise NotFoundError("Client not found")

    target = None
    if driver_id:
        target = store.get_driver(db, str(driver_id), None if day == "all" else day)
        if target is None:
            raise NotFoundError("Target driver not found")
        day = target.day

    client.assigned_driver_id = target.id if target is not None else None
    store.flush(db)

    stops = store.stops_for_client(db, client.id, day, delivery_date)
    for stop in stops:
        _move_stop(db, stop, target)
    log.info("client_assigned", client_id=client.id, driver_id=client.assigned_driver_id, stops=len(stops))
    return len(stops)


# --- route optimisation ---


class ReorganizeResult(NamedTuple):
    drivers_optimized: int
    stops_reordered: int


def _client_coords(db: Session, client_ids: list[str], delivery_date: date | None) -> dict[str, list]:
    """[lat, lng] per client; gaps are filled from the client's stops."""
    coords = {c.id: [c.lat, c.lng] for c in store.get_clients(db, client_ids)}
    missing = [cid for cid in client_ids if not has_coords(*coords.get(cid, (None, None)))]
    for stop in store.stops_for_clients(db, missing, delivery_date):
        current = coords.setdefault(stop.client_id, [None, None])
        if current[0] is None:
            current[0] = stop.lat
        if current[1] is None:
            current[1] = stop.lng
    return coords


def reorganize_route(
    db: Session,
    day: str | None,
    driver_id: str | None = None,
    delivery_date: date | None = None,
) -> ReorganizeResult:
    """
    Re-rank driver_route_order rows by nearest neighbour, one driver or every driver of the day.

    Positions are rewritten 0..n-1. Clients without coordinates (on the client or any of
    its stops) keep their relative order after the located ones.
    """
    day = normalize_day(day)
    drivers = store.list_drivers(db, None if day == "all" else day)
    if driver_id:
        drivers = [d for d in drivers if d.id == str(driver_id)]
        if not drivers:
            raise NotFoundError("Driver not found")

    rows_by_driver = {d.id: store.route_order_rows(db, d.id) for d in drivers}
    rows_by_driver = {did: rows for did, rows in rows_by_driver.items() if rows}
    if not rows_by_driver:
        return ReorganizeResult(0, 0)

    client_ids = sorted({r.client_id for rows in rows_by_driver.values() for r in rows})
    coords = _client_coords(db, client_ids, delivery_date)

    reordered = 0
    for did, rows in rows_by_driver.items():
        by_client = {r.client_id: r for r in rows}
        points = [(r.client_id, *coords.get(r.client_id, (None, None))) for r in rows]
        for position, client_id in enumerate(nearest_neighbour_order(points)):
            by_client[client_id].position = position
        reordered += len(rows)
    store.flush(db)
    log.info("routes_reorganized", day=day, drivers=len(rows_by_driver), clients=reordered)
    return ReorganizeResult(len(rows_by_driver), reordered)


def optimize_stop_order(db: Session, day: str | None, driver_id: str) -> int:
    """Put a driver's stop_ids in nearest-neighbour order. Ids of missing stops go last."""
    if not driver_id:
        raise ValidationError("driverId is required")
    day = normalize_day(day)
    driver = _require_driver(db, str(driver_id), day)
    stop_ids = store.decode_stop_ids(driver.stop_ids)
    if not stop_ids:
        return 0

    stops = {s.id: s for s in store.get_stops(db, stop_ids)}
    points = [
        (sid, stops[sid].lat, stops[sid].lng) if sid in stops else (sid, None, None)
        for sid in stop_ids
    ]
    store.set_driver_stops(db, driver, nearest_neighbour_order(points))
    log.info("route_optimized", driver_id=driver.id, day=day, stops=len(stop_ids))
    return len(stop_ids)


def consolidate_duplicates(db: Session, day: str | None) -> int:
    """
    Keep one stop per client across the day's routes, preferring Driver 0 and then the
    first driver by id. The extra stops leave their routes and are unassigned.
    """
    day = normalize_day(day)
    drivers = store.list_drivers(db, day)
    lists = {d.id: store.decode_stop_ids(d.stop_ids) for d in drivers}
    stops = {s.id: s for s in store.get_stops(db, {sid for ids in lists.values() for sid in ids})}

    held: dict[str, list[tuple[Driver, str]]] = {}
    for driver in sorted(drivers, key=lambda d: driver_number(d) != 0):
        for sid in dict.fromkeys(lists[driver.id]):
            stop = stops.get(sid)
            if stop is not None and stop.day == day and stop.client_id:
                held.setdefault(stop.client_id, []).append((driver, sid))

    removed: dict[str, set[str]] = {}
    kept: dict[str, str] = {}
    for (keeper, keep_sid), *extras in held.values():
        kept[keep_sid] = keeper.id
        for driver, sid in extras:
            removed.setdefault(driver.id, set()).add(sid)

    by_id = {d.id: d for d in drivers}
    for did, sids in removed.items():
        store.set_driver_stops(db, by_id[did], [sid for sid in lists[did] if sid not in sids])
    dropped = {sid for sids in removed.values() for sid in sids}
    store.unassign_stops(db, [sid for sid in dropped if sid not in kept])
    for sid in dropped & set(kept):
        store.assign_stops(db, [sid], kept[sid])

    count = sum(len(sids) for sids in removed.values())
    log.info("duplicates_consolidated", day=day, removed=count)
    return count
