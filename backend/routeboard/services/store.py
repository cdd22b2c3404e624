"""Assignment store adapter - parameterized reads/writes for drivers, stops, route runs and route order"""
import json
import uuid
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

import structlog
from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from routeboard.core.errors import StoreError
from routeboard.models import Client, Driver, DriverRouteOrder, RouteRun, Stop

log = structlog.get_logger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


def decode_stop_ids(raw) -> list[str]:
    """stop_ids as a list of strings; accepts a list, JSON text or None."""
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = json.loads(raw or "[]")
    if not isinstance(raw, list):
        return []
    return [str(v) for v in raw if v is not None and str(v).strip()]


@contextmanager
def guard(db: Session, operation: str) -> Iterator[None]:
    """Roll back and raise StoreError if a store call fails."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        log.error("store_call_failed", operation=operation, error_type=type(exc).__name__)
        raise StoreError(operation) from exc


def flush(db: Session, operation: str = "flush") -> None:
    with guard(db, operation):
        db.flush()


def commit(db: Session, operation: str) -> None:
    """Commit the request transaction. Everything flushed so far lands together or not at all."""
    with guard(db, operation):
        db.commit()


# --- stops ---


def list_stop_ids(db: Session, day: str) -> list[str]:
    """Stop ids for a day ordered by id; "all" is not filtered."""
    stmt = select(Stop.id).order_by(Stop.id.asc())
    if day != "all":
        stmt = stmt.where(Stop.day == day)
    with guard(db, "list_stop_ids"):
        return [str(v) for v in db.execute(stmt).scalars().all()]


def get_stop(db: Session, stop_id: str, day: str | None = None) -> Stop | None:
    stmt = select(Stop).where(Stop.id == stop_id)
    if day is not None:
        stmt = stmt.where(Stop.day == day)
    with guard(db, "get_stop"):
        return db.execute(stmt).scalars().first()


def get_stops(db: Session, stop_ids: Iterable[str]) -> list[Stop]:
    ids = list(stop_ids)
    if not ids:
        return []
    with guard(db, "get_stops"):
        return list(db.execute(select(Stop).where(Stop.id.in_(ids))).scalars().all())


def assign_stops(db: Session, stop_ids: Iterable[str], driver_id: str) -> int:
    """Bulk set assigned_driver_id for the given stops."""
    ids = list(stop_ids)
    if not ids:
        return 0
    with guard(db, "assign_stops"):
        db.execute(update(Stop).where(Stop.id.in_(ids)).values(assigned_driver_id=driver_id))
    return len(ids)


def unassign_stops(db: Session, stop_ids: Iterable[str], clear_proof: bool = False) -> int:
    """Clear assigned_driver_id; clear_proof also resets completed and proof_url."""
    ids = list(stop_ids)
    if not ids:
        return 0
    values: dict = {"assigned_driver_id": None}
    if clear_proof:
        values.update(completed=False, proof_url=None)
    with guard(db, "unassign_stops"):
        db.execute(update(Stop).where(Stop.id.in_(ids)).values(**values))
    return len(ids)


def unassign_stops_of_drivers(db: Session, driver_ids: Iterable[str], keep: Iterable[str] = ()) -> None:
    """Clear assigned_driver_id on stops pointing at any of driver_ids, except stops in keep."""
    ids = list(driver_ids)
    if not ids:
        return
    stmt = update(Stop).where(Stop.assigned_driver_id.in_(ids))
    keep_ids = list(keep)
    if keep_ids:
        stmt = stmt.where(Stop.id.not_in(keep_ids))
    with guard(db, "unassign_stops_of_drivers"):
        db.execute(stmt.values(assigned_driver_id=None))


def set_stop_completed(db: Session, stop: Stop, completed: bool) -> None:
    with guard(db, "set_stop_completed"):
        stop.completed = completed
        db.flush()


def stops_for_client(db: Session, client_id: str, day: str | None = None, delivery_date=None) -> list[Stop]:
    stmt = select(Stop).where(Stop.client_id == client_id)
    if day and day != "all":
        stmt = stmt.where(Stop.day == day)
    if delivery_date is not None:
        stmt = stmt.where(Stop.delivery_date == delivery_date)
    with guard(db, "stops_for_client"):
        return list(db.execute(stmt).scalars().all())


# --- drivers ---


def list_drivers(db: Session, day: str | None) -> list[Driver]:
    """Drivers for a day ordered by id; None returns every driver."""
    stmt = select(Driver).order_by(Driver.id.asc())
    if day is not None:
        stmt = stmt.where(Driver.day == day)
    with guard(db, "list_drivers"):
        return list(db.execute(stmt).scalars().all())


def get_driver(db: Session, driver_id: str, day: str | None = None) -> Driver | None:
    stmt = select(Driver).where(Driver.id == driver_id)
    if day is not None:
        stmt = stmt.where(Driver.day == day)
    with guard(db, "get_driver"):
        return db.execute(stmt).scalars().first()


def create_driver(
    db: Session,
    day: str,
    name: str,
    color: str | None,
    sequence_number: int | None,
    stop_ids: list[str] | None = None,
    driver_id: str | None = None,
) -> Driver:
    driver = Driver(
        id=driver_id or new_id(),
        day=day,
        name=name,
        color=color,
        sequence_number=sequence_number,
        stop_ids=list(stop_ids or []),
    )
    with guard(db, "create_driver"):
        db.add(driver)
        db.flush()
    return driver


def set_driver_stops(db: Session, driver: Driver, stop_ids: Iterable[str]) -> None:
    # assign a new list object so the JSON column is marked dirty
    with guard(db, "set_driver_stops"):
        driver.stop_ids = list(stop_ids)
        db.flush()


def clear_driver_stops(db: Session, day: str, except_ids: Iterable[str]) -> list[Driver]:
    """Empty stop_ids of every driver on day not in except_ids. Returns the drivers cleared."""
    keep = set(except_ids)
    cleared = [d for d in list_drivers(db, day) if d.id not in keep]
    for driver in cleared:
        set_driver_stops(db, driver, [])
    return cleared


# --- route runs ---


def insert_run(db: Session, day: str, snapshot: list[dict], run_id: str | None = None) -> RouteRun:
    run = RouteRun(id=run_id or new_id(), day=day, snapshot=snapshot)
    with guard(db, "insert_run"):
        db.add(run)
        db.flush()
    return run


def get_run(db: Session, run_id: str, day: str | None = None) -> RouteRun | None:
    stmt = select(RouteRun).where(RouteRun.id == run_id)
    if day is not None:
        stmt = stmt.where(RouteRun.day == day)
    with guard(db, "get_run"):
        return db.execute(stmt).scalars().first()


def recent_runs(db: Session, day: str, limit: int) -> list[RouteRun]:
    stmt = select(RouteRun).where(RouteRun.day == day).order_by(RouteRun.created_at.desc()).limit(limit)
    with guard(db, "recent_runs"):
        return list(db.execute(stmt).scalars().all())


def latest_run(db: Session, day: str) -> RouteRun | None:
    runs = recent_runs(db, day, 1)
    return runs[0] if runs else None


def update_run_snapshot(db: Session, run: RouteRun, snapshot: list[dict]) -> None:
    with guard(db, "update_run_snapshot"):
        run.snapshot = snapshot
        db.flush()


# --- driver route order ---


def route_order_rows(db: Session, driver_id: str) -> list[DriverRouteOrder]:
    """Rows for a driver in display order: (position, client_id) ascending."""
    stmt = (
        select(DriverRouteOrder)
        .where(DriverRouteOrder.driver_id == driver_id)
        .order_by(DriverRouteOrder.position.asc(), DriverRouteOrder.client_id.asc())
    )
    with guard(db, "route_order_rows"):
        return list(db.execute(stmt).scalars().all())


def upsert_route_order(db: Session, driver_id: str, client_id: str, position: int) -> DriverRouteOrder:
    with guard(db, "upsert_route_order"):
        row = db.get(DriverRouteOrder, (driver_id, client_id))
        if row is None:
            row = DriverRouteOrder(driver_id=driver_id, client_id=client_id, position=position)
            db.add(row)
        else:
            row.position = position
        db.flush()
    return row


def all_route_order_pairs(db: Session) -> list[tuple[str, str]]:
    stmt = select(DriverRouteOrder.driver_id, DriverRouteOrder.client_id)
    with guard(db, "all_route_order_pairs"):
        return [(str(d), str(c)) for d, c in db.execute(stmt).all()]


def delete_route_order(db: Session, driver_id: str, client_id: str) -> None:
    with guard(db, "delete_route_order"):
        db.execute(
            delete(DriverRouteOrder).where(
                DriverRouteOrder.driver_id == driver_id,
                DriverRouteOrder.client_id == client_id,
            )
        )


# --- clients ---


def get_client(db: Session, client_id: str) -> Client | None:
    with guard(db, "get_client"):
        return db.get(Client, client_id)


def assigned_client_pairs(db: Session) -> list[tuple[str, str]]:
    """(assigned_driver_id, client_id) for every client with a driver."""
    stmt = select(Client.assigned_driver_id, Client.id).where(Client.assigned_driver_id.is_not(None))
    with guard(db, "assigned_client_pairs"):
        return [(str(d), str(c)) for d, c in db.execute(stmt).all()]


def clients_assigned_to(db: Session, driver_id: str) -> list[str]:
    stmt = select(Client.id).where(Client.assigned_driver_id == driver_id).order_by(Client.id.asc())
    with guard(db, "clients_assigned_to"):
        return [str(v) for v in db.execute(stmt).scalars().all()]


def deliverable_clients(db: Session) -> list[Client]:
    """Clients that can receive deliveries: not paused, delivery not switched off."""
    stmt = (
        select(Client)
        .where(Client.paused.is_(False))
        .where(or_(Client.delivery.is_(None), Client.delivery.is_(True)))
        .order_by(Client.id.asc())
    )
    with guard(db, "deliverable_clients"):
        return list(db.execute(stmt).scalars().all())


def all_clients(db: Session) -> list[Client]:
    with guard(db, "all_clients"):
        return list(db.execute(select(Client)).scalars().all())


def drivers_for_day_view(db: Session, day: str) -> list[Driver]:
    """Drivers shown for a day; a specific day also includes drivers generated for "all"."""
    stmt = select(Driver).order_by(Driver.id.asc())
    if day != "all":
        stmt = stmt.where(or_(Driver.day == day, Driver.day == "all"))
    with guard(db, "drivers_for_day_view"):
        return list(db.execute(stmt).scalars().all())


def get_clients(db: Session, client_ids: Iterable[str]) -> list[Client]:
    ids = list(client_ids)
    if not ids:
        return []
    with guard(db, "get_clients"):
        return list(db.execute(select(Client).where(Client.id.in_(ids))).scalars().all())


def stops_for_clients(db: Session, client_ids: Iterable[str], delivery_date=None) -> list[Stop]:
    """Stops of any of the clients; with delivery_date, that date or undated stops only."""
    ids = list(client_ids)
    if not ids:
        return []
    stmt = select(Stop).where(Stop.client_id.in_(ids)).order_by(Stop.id.asc())
    if delivery_date is not None:
        stmt = stmt.where(or_(Stop.delivery_date == delivery_date, Stop.delivery_date.is_(None)))
    with guard(db, "stops_for_clients"):
        return list(db.execute(stmt).scalars().all())
