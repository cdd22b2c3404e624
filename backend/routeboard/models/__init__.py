"""DB models"""
from routeboard.models.client import Client
from routeboard.models.driver import Driver, DriverRouteOrder
from routeboard.models.stop import Stop
from routeboard.models.route_run import RouteRun

__all__ = [
    "Client",
    "Driver",
    "DriverRouteOrder",
    "Stop",
    "RouteRun",
]
