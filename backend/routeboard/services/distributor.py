"""Route generation - split a day's stops evenly across N drivers"""
from typing import NamedTuple

import structlog
from sqlalchemy.orm import Session

from routeboard.core.errors import ValidationError
from routeboard.core.naming import driver_name, normalize_day, palette_color, sort_by_number
from routeboard.services import store
from routeboard.services.snapshots import build_snapshot

log = structlog.get_logger(__name__)


class GenerateResult(NamedTuple):
    day: str
    run_id: str
    drivers_created: int
    stops_assigned: int


def split_evenly(stop_ids: list[str], driver_count: int) -> list[list[str]]:
    """
    Contiguous slices of stop_ids, one per driver. The first (total % driver_count)
    drivers get one extra stop.
    """
    if driver_count <= 0:
        raise ValidationError("Invalid driverCount")
    base, remainder = divmod(len(stop_ids), driver_count)
    slices = []
    start = 0
    for i in range(driver_count):
        count = base + (1 if i < remainder else 0)
        slices.append(list(stop_ids[start:start + count]))
        start += count
    return slices


def generate_routes(db: Session, day: str | None, driver_count: int) -> GenerateResult:
    """
    Rebuild the day's routes with exactly driver_count drivers and record a new route run.

    Existing drivers are reused in driver-number order and renumbered Driver 0..N-1;
    drivers beyond N are kept but emptied. Stops are handed out in id order.
    Nothing is committed here.
    """
    if isinstance(driver_count, bool) or not isinstance(driver_count, int) or driver_count <= 0:
        raise ValidationError("Invalid driverCount")
    day = normalize_day(day)

    stop_ids = store.list_stop_ids(db, day)
    existing = sort_by_number(store.list_drivers(db, day))

    drivers = []
    for i in range(driver_count):
        name, color = driver_name(i), palette_color(i)
        if i < len(existing):
            driver = existing[i]
            driver.name = name
            driver.color = color
            driver.sequence_number = i
            store.set_driver_stops(db, driver, [])
        else:
            driver = store.create_driver(db, day, name, color, sequence_number=i)
        drivers.append(driver)

    retired = existing[driver_count:]
    for driver in retired:
        store.set_driver_stops(db, driver, [])
    store.unassign_stops_of_drivers(db, [d.id for d in retired])

    for driver, chunk in zip(drivers, split_evenly(stop_ids, driver_count)):
        store.set_driver_stops(db, driver, chunk)
        store.assign_stops(db, chunk, driver.id)

    run = store.insert_run(db, day, build_snapshot(drivers))
    log.info(
        "routes_generated",
        day=day,
        drivers=driver_count,
        retired=len(retired),
        stops=len(stop_ids),
        run_id=run.id,
    )
    return GenerateResult(day=day, run_id=run.id, drivers_created=len(drivers), stops_assigned=len(stop_ids))
