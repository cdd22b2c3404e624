"""Read views for the routes page and the driver app"""
from sqlalchemy.orm import Session

from routeboard.core.errors import NotFoundError, ValidationError
from routeboard.core.naming import display_color, normalize_day
from routeboard.models import Client, Stop
from routeboard.services import store


def _has(service_type: str | None, word: str) -> bool:
    return word in (service_type or "").lower()


def _is_dependant(c: Client) -> bool:
    return c.parent_client_id is not None and c.parent_client_id != ""


def client_stats(clients: list[Client]) -> dict:
    """Summary counts across every client, paused or not."""
    primaries = [c for c in clients if not _is_dependant(c)]
    dependants = [c for c in clients if _is_dependant(c)]
    return {
        "total_clients": len(clients),
        "total_dependants": len(dependants),
        "total_primaries_food": sum(1 for c in primaries if _has(c.service_type, "food")),
        "total_produce": sum(1 for c in clients if _has(c.service_type, "produce")),
        "primary_paused_or_delivery_off": sum(
            1
            for c in primaries
            if (c.paused or c.delivery is False) and (c.service_type or "").strip().lower() != "produce"
        ),
        "primary_food_missing_geo": sum(
            1 for c in primaries if _has(c.service_type, "food") and (c.lat is None or c.lng is None)
        ),
        "dependant_missing_geo": sum(
            1
            for c in dependants
            if (c.lat is None or c.lng is None) and not c.paused and c.delivery is not False
        ),
    }


def _client_row(c: Client) -> dict:
    return {
        "id": c.id,
        "first": c.first_name or "",
        "last": c.last_name or "",
        "name": c.full_name or "",
        "full_name": c.full_name or "",
        "address": c.address or "",
        "apt": c.apt or None,
        "city": c.city or "",
        "state": c.state or "",
        "zip": c.zip or "",
        "phone": c.phone_number or None,
        "lat": c.lat,
        "lng": c.lng,
        "paused": bool(c.paused),
        "delivery": True if c.delivery is None else bool(c.delivery),
        "assigned_driver_id": c.assigned_driver_id,
        "assignedDriverId": c.assigned_driver_id,
    }


def assignment_data(db: Session, day: str | None) -> dict:
    """Deliverable clients with their driver, the day's drivers and client stats."""
    day = normalize_day(day)
    clients = [_client_row(c) for c in store.deliverable_clients(db)]
    drivers = []
    for d in store.list_drivers(db, None if day == "all" else day):
        drivers.append({
            "id": d.id,
            "name": d.name or f"Driver {len(drivers)}",
            "color": display_color(d.color, len(drivers)),
        })
    return {"clients": clients, "drivers": drivers, "stats": client_stats(store.all_clients(db))}


def mobile_routes(db: Session, day: str | None) -> list[dict]:
    """Route summaries with progress; only stop ids that still exist are reported."""
    day = normalize_day(day)
    drivers = store.drivers_for_day_view(db, day)
    all_ids = {sid for d in drivers for sid in store.decode_stop_ids(d.stop_ids)}
    stops = {s.id: s for s in store.get_stops(db, all_ids)}

    routes = []
    for d in drivers:
        ids = [sid for sid in store.decode_stop_ids(d.stop_ids) if sid in stops]
        routes.append({
            "id": d.id,
            "name": d.name,
            "color": d.color,
            "stopIds": ids,
            "totalStops": len(ids),
            "completedStops": sum(1 for sid in ids if stops[sid].completed),
        })
    return routes


def complete_stop(db: Session, stop_id, completed: bool) -> Stop:
    stop_id = str(stop_id).strip() if stop_id is not None else ""
    if not stop_id:
        raise ValidationError("stopId is required and must be a valid string")
    stop = store.get_stop(db, stop_id)
    if stop is None:
        raise NotFoundError("Stop not found")
    store.set_stop_completed(db, stop, completed)
    return stop
