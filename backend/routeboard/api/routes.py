"""Driver route assignment - generate, runs, edits and reconciliation"""
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from routeboard.config import get_settings
from routeboard.core.errors import ValidationError
from routeboard.database import get_db
from routeboard.schemas.route import (
    AddDriverRequest,
    AddDriverResponse,
    ApplyRunRequest,
    ApplyRunResponse,
    AssignClientDriverRequest,
    AssignClientDriverResponse,
    DriverColorRequest,
    DriverColorResponse,
    DriverSummary,
    GenerateRoutesRequest,
    GenerateRoutesResponse,
    OkResponse,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
    ReassignStopRequest,
    RenameDriverRequest,
    RenameDriverResponse,
    ReorganizeRouteRequest,
    ReorganizeRouteResponse,
    ReorderRouteRequest,
    ResetDriverRequest,
    ResetDriverResponse,
    ReverseRouteRequest,
    RouteOrderEntry,
    RouteOrderResponse,
    RunListResponse,
    SaveCurrentRequest,
    SaveCurrentResponse,
    SyncOrphansResponse,
)
from routeboard.services import distributor, editor, reconciler, snapshots, store, views


def no_store(response: Response) -> None:
    """Assignment state may have just changed; never let it be cached."""
    response.headers["Cache-Control"] = "no-store"


router = APIRouter(prefix="/api/route", tags=["route"], dependencies=[Depends(no_store)])


def _id(value) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


@router.post("/generate", response_model=GenerateRoutesResponse)
def generate_routes(data: GenerateRoutesRequest, db: Session = Depends(get_db)):
    """Split the day's stops across driverCount drivers and record a new run"""
    count = data.driver_count if data.driver_count is not None else get_settings().default_driver_count
    result = distributor.generate_routes(db, data.day, count)
    store.commit(db, "generate_routes")
    return GenerateRoutesResponse(
        message=f'Generated routes with {count} drivers for day "{result.day}"',
        run_id=result.run_id,
        drivers_created=result.drivers_created,
        stops_assigned=result.stops_assigned,
    )


@router.post("/apply-run", response_model=ApplyRunResponse)
def apply_run(data: ApplyRunRequest, db: Session = Depends(get_db)):
    if data.run_id is None:
        raise ValidationError("runId is required")
    result = snapshots.apply_run(db, str(data.run_id))
    store.commit(db, "apply_run")
    return ApplyRunResponse(drivers_updated=result.drivers_updated)


@router.get("/runs", response_model=RunListResponse)
def list_runs(day: str | None = Query(None), db: Session = Depends(get_db)):
    """Most recent runs for the day, newest first"""
    return RunListResponse(runs=snapshots.list_runs(db, day, get_settings().recent_runs_limit))


@router.post("/runs/save-current", response_model=SaveCurrentResponse)
def save_current(data: SaveCurrentRequest, db: Session = Depends(get_db)):
    result = snapshots.save_current_state(db, data.day, run_id=_id(data.run_id), as_new=data.as_new)
    store.commit(db, "save_current_state")
    return SaveCurrentResponse(id=result.id, message=result.message)


@router.post("/reorder-route", response_model=OkResponse, response_model_exclude_none=True)
def reorder_route(data: ReorderRouteRequest, db: Session = Depends(get_db)):
    """Set a client's position in a driver's route (ties ordered by client id)"""
    editor.reorder_within_route(db, _id(data.driver_id), _id(data.client_id), data.new_position)
    store.commit(db, "reorder_within_route")
    return OkResponse()


@router.get("/route-order/{driver_id}", response_model=RouteOrderResponse)
def get_route_order(driver_id: str, db: Session = Depends(get_db)):
    rows = editor.route_order(db, driver_id)
    return RouteOrderResponse(
        driver_id=driver_id,
        clients=[RouteOrderEntry(client_id=r.client_id, position=r.position) for r in rows],
    )


@router.post("/reverse", response_model=OkResponse)
def reverse_route(data: ReverseRouteRequest, db: Session = Depends(get_db)):
    result = editor.reverse_route(db, _id(data.route_id))
    store.commit(db, "reverse_route")
    if result.stops:
        return OkResponse(message=f"Reversed {result.stops} stops")
    if result.clients:
        return OkResponse(message=f"Reversed {result.clients} clients")
    return OkResponse(message="No stops to reverse")


@router.post("/reset", response_model=ResetDriverResponse)
def reset_driver(data: ResetDriverRequest, db: Session = Depends(get_db)):
    driver_id = _id(data.driver_id)
    cleared = editor.reset_driver(db, driver_id, data.day, clear_proof=data.clear_proof)
    store.commit(db, "reset_driver")
    return ResetDriverResponse(message=f"Routes reset for driver {driver_id}", stops_cleared=cleared)


@router.post("/rename-driver", response_model=RenameDriverResponse)
def rename_driver(data: RenameDriverRequest, db: Session = Depends(get_db)):
    result = editor.rename_driver(db, _id(data.driver_id), data.new_number)
    store.commit(db, "rename_driver")
    return RenameDriverResponse(
        message=f"Driver renamed from {result.old_name} to {result.new_name}",
        old_name=result.old_name,
        new_name=result.new_name,
    )


@router.post("/add-driver", response_model=AddDriverResponse)
def add_driver(data: AddDriverRequest, db: Session = Depends(get_db)):
    result = editor.add_driver(db, data.day)
    store.commit(db, "add_driver")
    d = result.driver
    return AddDriverResponse(driver=DriverSummary(id=d.id, name=d.name, color=d.color), run_id=result.run_id)


@router.post("/driver-color", response_model=DriverColorResponse)
def set_driver_color(data: DriverColorRequest, db: Session = Depends(get_db)):
    driver_id = _id(data.driver_id)
    color = editor.set_driver_color(db, driver_id, data.color)
    store.commit(db, "set_driver_color")
    return DriverColorResponse(driver_id=driver_id, color=color)


@router.post("/reassign", response_model=OkResponse, response_model_exclude_none=True)
def reassign_stop(data: ReassignStopRequest, db: Session = Depends(get_db)):
    """Move one stop to another driver's route"""
    editor.reassign_stop(db, data.day, _id(data.stop_id), _id(data.to_driver_id))
    store.commit(db, "reassign_stop")
    return OkResponse()


@router.post("/assign-client-driver", response_model=AssignClientDriverResponse)
def assign_client_driver(data: AssignClientDriverRequest, db: Session = Depends(get_db)):
    updated = editor.assign_client_driver(
        db, _id(data.client_id), _id(data.driver_id), data.day, delivery_date=data.delivery_date
    )
    store.commit(db, "assign_client_driver")
    suffix = f" and {updated} existing stop(s)" if updated > 0 else ""
    return AssignClientDriverResponse(stops_updated=updated, message=f"Updated client assignment{suffix}")


@router.post("/reorganize", response_model=ReorganizeRouteResponse)
def reorganize_route(data: ReorganizeRouteRequest, db: Session = Depends(get_db)):
    """Re-rank route order by nearest neighbour for one driver or the whole day"""
    result = editor.reorganize_route(db, data.day, _id(data.driver_id), delivery_date=data.delivery_date)
    store.commit(db, "reorganize_route")
    if result.drivers_optimized == 0:
        message = "No route orders to reorganize"
    else:
        message = f"Reorganized {result.drivers_optimized} route(s)"
    return ReorganizeRouteResponse(
        message=message,
        drivers_optimized=result.drivers_optimized,
        stops_reordered=result.stops_reordered,
    )


@router.post("/optimize", response_model=OptimizeRouteResponse, response_model_exclude_none=True)
def optimize_route(data: OptimizeRouteRequest, db: Session = Depends(get_db)):
    """Drop duplicate client stops and/or put one driver's stops in nearest-neighbour order"""
    driver_id = _id(data.driver_id)
    if not driver_id and not data.consolidate_duplicates:
        raise ValidationError("driverId or consolidateDuplicates is required")
    removed = editor.consolidate_duplicates(db, data.day) if data.consolidate_duplicates else None
    if not driver_id:
        store.commit(db, "consolidate_duplicates")
        return OptimizeRouteResponse(message="Duplicates consolidated", duplicates_removed=removed)

    reordered = editor.optimize_stop_order(db, data.day, driver_id)
    store.commit(db, "optimize_stop_order")
    message = f"Route optimized for driver {driver_id}" if reordered else "No stops to optimize"
    return OptimizeRouteResponse(message=message, stops_reordered=reordered, duplicates_removed=removed)


@router.post("/sync-orphans", response_model=SyncOrphansResponse)
def sync_orphans(db: Session = Depends(get_db)):
    """Drop route-order rows whose client is no longer assigned to that driver"""
    removed = reconciler.sync_orphans(db)
    store.commit(db, "sync_orphans")
    return SyncOrphansResponse(removed=removed)


@router.get("/assignment-data")
def assignment_data(day: str | None = Query(None), db: Session = Depends(get_db)):
    return views.assignment_data(db, day)
