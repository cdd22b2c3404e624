"""Route assignment request/response schemas (camelCase on the wire)"""
from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

Identifier = str | int


def _reject_bool(v):
    # JSON true/false would otherwise coerce to 1/0
    if isinstance(v, bool):
        raise ValueError("must be an integer")
    return v


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --- requests ---


class GenerateRoutesRequest(_Body):
    day: str | None = None
    driver_count: int | None = Field(None, alias="driverCount", gt=0)

    @field_validator("driver_count", mode="before")
    @classmethod
    def strict_count(cls, v):
        return _reject_bool(v)


class ApplyRunRequest(_Body):
    run_id: Identifier | None = Field(None, alias="runId")


class SaveCurrentRequest(_Body):
    day: str | None = None
    run_id: Identifier | None = Field(None, alias="runId")
    as_new: bool = Field(False, alias="asNew")


class ReorderRouteRequest(_Body):
    driver_id: Identifier | None = None
    client_id: Identifier | None = None
    new_position: int | None = Field(None, ge=0)

    @field_validator("new_position", mode="before")
    @classmethod
    def strict_position(cls, v):
        return _reject_bool(v)


class ReverseRouteRequest(_Body):
    route_id: Identifier | None = Field(None, alias="routeId")


class ResetDriverRequest(_Body):
    driver_id: Identifier | None = Field(None, alias="driverId")
    day: str | None = None
    clear_proof: bool = Field(False, alias="clearProof")


class RenameDriverRequest(_Body):
    driver_id: Identifier | None = Field(None, alias="driverId")
    new_number: int | None = Field(None, alias="newNumber", ge=0)

    @field_validator("new_number", mode="before")
    @classmethod
    def strict_number(cls, v):
        return _reject_bool(v)


class AddDriverRequest(_Body):
    day: str | None = None


class DriverColorRequest(_Body):
    driver_id: Identifier | None = Field(None, alias="driverId")
    color: str | None = None


class ReassignStopRequest(_Body):
    day: str | None = None
    stop_id: Identifier | None = Field(None, alias="stopId")
    to_driver_id: Identifier | None = Field(None, alias="toDriverId")


class AssignClientDriverRequest(_Body):
    client_id: Identifier | None = Field(None, alias="clientId")
    driver_id: Identifier | None = Field(None, alias="driverId")
    day: str | None = None
    delivery_date: date | None = None


class ReorganizeRouteRequest(_Body):
    day: str | None = None
    driver_id: Identifier | None = Field(None, alias="driverId")
    delivery_date: date | None = None


class OptimizeRouteRequest(_Body):
    day: str | None = None
    driver_id: Identifier | None = Field(None, alias="driverId")
    consolidate_duplicates: bool = Field(False, alias="consolidateDuplicates")


class CompleteStopRequest(_Body):
    stop_id: Identifier | None = Field(None, alias="stopId")
    completed: bool = False


# --- responses ---


class GenerateRoutesResponse(_Body):
    success: bool = True
    message: str
    run_id: str = Field(alias="runId")
    drivers_created: int = Field(alias="driversCreated")
    stops_assigned: int = Field(alias="stopsAssigned")


class ApplyRunResponse(_Body):
    success: bool = True
    message: str = "Route run applied successfully"
    drivers_updated: int = Field(alias="driversUpdated")


class SaveCurrentResponse(_Body):
    id: str
    message: str


class RunSummary(_Body):
    id: str
    created_at: str | None = Field(None, alias="createdAt")


class RunListResponse(_Body):
    runs: list[RunSummary] = Field(default_factory=list)


class OkResponse(_Body):
    ok: bool = True
    message: str | None = None


class RouteOrderEntry(_Body):
    client_id: str = Field(alias="clientId")
    position: int


class RouteOrderResponse(_Body):
    driver_id: str = Field(alias="driverId")
    clients: list[RouteOrderEntry] = Field(default_factory=list)


class ResetDriverResponse(_Body):
    success: bool = True
    message: str
    stops_cleared: int = Field(alias="stopsCleared")


class RenameDriverResponse(_Body):
    success: bool = True
    message: str
    old_name: str = Field(alias="oldName")
    new_name: str = Field(alias="newName")


class DriverSummary(_Body):
    id: str
    name: str
    color: str | None = None


class AddDriverResponse(_Body):
    success: bool = True
    message: str = "Driver added successfully"
    driver: DriverSummary
    run_id: str = Field(alias="runId")


class DriverColorResponse(_Body):
    success: bool = True
    message: str = "Driver color updated"
    driver_id: str = Field(alias="driverId")
    color: str


class AssignClientDriverResponse(_Body):
    success: bool = True
    stops_updated: int = Field(alias="stopsUpdated")
    message: str


class SyncOrphansResponse(_Body):
    success: bool = True
    removed: int


class ReorganizeRouteResponse(_Body):
    success: bool = True
    message: str
    drivers_optimized: int = Field(alias="driversOptimized")
    stops_reordered: int = Field(alias="stopsReordered")


class OptimizeRouteResponse(_Body):
    success: bool = True
    message: str
    stops_reordered: int | None = Field(None, alias="stopsReordered")
    duplicates_removed: int | None = Field(None, alias="duplicatesRemoved")
