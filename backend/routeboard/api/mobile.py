"""Driver app endpoints - route progress and stop completion"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from routeboard.api.routes import no_store
from routeboard.database import get_db
from routeboard.schemas.route import CompleteStopRequest
from routeboard.services import store, views

router = APIRouter(prefix="/api/mobile", tags=["mobile"], dependencies=[Depends(no_store)])


@router.get("/routes")
def mobile_routes(day: str | None = Query(None), db: Session = Depends(get_db)):
    """Route summaries with completed/total stop counts"""
    return {"routes": views.mobile_routes(db, day)}


@router.post("/stop/complete")
def complete_stop(data: CompleteStopRequest, db: Session = Depends(get_db)):
    stop = views.complete_stop(db, data.stop_id, data.completed)
    store.commit(db, "complete_stop")
    return {"ok": True, "stop": {"id": stop.id, "completed": stop.completed}}
