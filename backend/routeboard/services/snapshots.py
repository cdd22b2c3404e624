"""Route runs - save the live driver assignment as a snapshot and restore it later"""
import json
from typing import NamedTuple

import structlog
from sqlalchemy.orm import Session

from routeboard.core.errors import NotFoundError, ValidationError
from routeboard.core.naming import normalize_day, parse_driver_number
from routeboard.models import Driver, RouteRun
from routeboard.services import store

log = structlog.get_logger(__name__)


class SaveResult(NamedTuple):
    id: str
    message: str
    created: bool


class ApplyResult(NamedTuple):
    run_id: str
    day: str
    drivers_updated: int


def build_snapshot(drivers: list[Driver]) -> list[dict]:
    """Canonical snapshot entries, in the order given."""
    return [
        {
            "driverId": d.id,
            "driverName": d.name,
            "color": d.color,
            "stopIds": store.decode_stop_ids(d.stop_ids),
        }
        for d in drivers
    ]


def parse_snapshot(raw) -> list:
    """Snapshot column value as a list; text is JSON-decoded."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw or "[]")
        except ValueError as exc:
            raise ValidationError("Invalid snapshot format") from exc
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError("Invalid snapshot format")
    return raw


def save_current_state(db: Session, day: str | None, run_id: str | None = None, as_new: bool = False) -> SaveResult:
    """
    Store the day's live assignment.

    as_new always inserts a run. Otherwise run_id is updated in place (only if it
    belongs to the day; a missing run is ignored), and with neither the most
    recent run of the day is updated, or a first one inserted.
    """
    day = normalize_day(day)
    snapshot = build_snapshot(store.list_drivers(db, day))

    if as_new:
        run = store.insert_run(db, day, snapshot)
        log.info("route_run_saved", day=day, run_id=run.id, drivers=len(snapshot))
        return SaveResult(run.id, "Route run saved", True)

    if run_id:
        run = store.get_run(db, run_id, day)
        if run is not None:
            store.update_run_snapshot(db, run, snapshot)
        else:
            log.info("route_run_update_skipped", day=day, run_id=run_id)
        return SaveResult(run_id, "Route run updated", False)

    run = store.latest_run(db, day)
    if run is not None:
        store.update_run_snapshot(db, run, snapshot)
        log.info("route_run_updated", day=day, run_id=run.id, drivers=len(snapshot))
        return SaveResult(run.id, "Route run updated", False)
    run = store.insert_run(db, day, snapshot)
    log.info("route_run_saved", day=day, run_id=run.id, drivers=len(snapshot))
    return SaveResult(run.id, "Route run saved", True)


def load_run(db: Session, run_id) -> tuple[RouteRun, list]:
    if run_id is None or str(run_id).strip() == "":
        raise ValidationError("runId is required")
    run = store.get_run(db, str(run_id))
    if run is None:
        raise NotFoundError("Route run not found")
    return run, parse_snapshot(run.snapshot)


def apply_snapshot(db: Session, day: str, entries: list) -> int:
    """
    Make the day's live assignment match entries.

    Listed drivers are upserted with their stop lists and their stops pointed at
    them. Drivers of the day that are not listed are emptied, and any stop still
    pointing at a snapshot or emptied driver without being listed is unassigned.
    """
    applied: list[str] = []
    listed_stops: set[str] = set()
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("driverId"):
            continue
        driver_id = str(entry["driverId"])
        stop_ids = store.decode_stop_ids(entry.get("stopIds")) if isinstance(entry.get("stopIds"), list) else []
        name = entry.get("driverName") or f"Driver {driver_id}"
        color = entry.get("color") or None

        driver = store.get_driver(db, driver_id, day)
        if driver is not None:
            driver.name = name
            driver.color = color
            driver.sequence_number = parse_driver_number(name)
            store.set_driver_stops(db, driver, stop_ids)
        else:
            store.create_driver(
                db, day, name, color, parse_driver_number(name), stop_ids=stop_ids, driver_id=driver_id
            )
        store.assign_stops(db, stop_ids, driver_id)
        applied.append(driver_id)
        listed_stops.update(stop_ids)

    if not applied:
        return 0
    cleared = store.clear_driver_stops(db, day, applied)
    store.unassign_stops_of_drivers(db, applied + [d.id for d in cleared], keep=listed_stops)
    return len(applied)


def apply_run(db: Session, run_id) -> ApplyResult:
    """Restore a saved route run over the live assignment of its day."""
    run, entries = load_run(db, run_id)
    day = run.day or "all"
    apply_snapshot(db, day, entries)
    log.info("route_run_applied", run_id=run.id, day=day, drivers=len(entries))
    return ApplyResult(run_id=run.id, day=day, drivers_updated=len(entries))


def list_runs(db: Session, day: str | None, limit: int = 10) -> list[dict]:
    day = normalize_day(day)
    return [
        {"id": r.id, "createdAt": r.created_at.isoformat() if r.created_at else None}
        for r in store.recent_runs(db, day, limit)
    ]
