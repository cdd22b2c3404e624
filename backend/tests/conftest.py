"""Test fixtures - in-memory SQLite with get_db overridden"""
import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from routeboard.database import Base, get_db
from routeboard.main import app
from routeboard.models import Client, Driver, DriverRouteOrder, Stop


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def add_stops(db):
    """Insert count stops for a day with zero-padded ids so id order is numeric order"""

    def _add(day: str, count: int, prefix: str = "s", **fields) -> list[str]:
        ids = []
        for i in range(1, count + 1):
            stop_id = f"{prefix}{i:03d}"
            db.add(Stop(id=stop_id, day=day, name=f"Stop {i}", address=f"{i} Main St", **fields))
            ids.append(stop_id)
        db.commit()
        return ids

    return _add


@pytest.fixture
def add_driver(db):
    def _add(driver_id: str, day: str, name: str, stop_ids=None, sequence_number=None, color=None) -> Driver:
        driver = Driver(
            id=driver_id,
            day=day,
            name=name,
            color=color,
            sequence_number=sequence_number,
            stop_ids=list(stop_ids or []),
        )
        db.add(driver)
        if stop_ids:
            for stop in db.query(Stop).filter(Stop.id.in_(list(stop_ids))):
                stop.assigned_driver_id = driver_id
        db.commit()
        return driver

    return _add


@pytest.fixture
def add_client(db):
    def _add(client_id: str, assigned_driver_id: str | None = None, **fields) -> Client:
        c = Client(id=client_id, assigned_driver_id=assigned_driver_id, **fields)
        db.add(c)
        db.commit()
        return c

    return _add


@pytest.fixture
def add_route_order(db):
    def _add(driver_id: str, client_id: str, position: int) -> DriverRouteOrder:
        row = DriverRouteOrder(driver_id=driver_id, client_id=client_id, position=position)
        db.add(row)
        db.commit()
        return row

    return _add
