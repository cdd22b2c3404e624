"""Smoke tests - basic API behaviour"""
from routeboard.database import _engine_options


def test_health(client):
    """Health check"""
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_runs_empty(client):
    """No runs yet for the day"""
    r = client.get("/api/route/runs", params={"day": "monday"})
    assert r.status_code == 200
    assert r.json() == {"runs": []}
    assert r.headers["cache-control"] == "no-store"


def test_unknown_path_is_json_error(client):
    r = client.get("/api/route/nope")
    assert r.status_code == 404
    assert "error" in r.json()


def test_engine_options_per_backend():
    """sqlite gets thread-shareable connections, servers get pre-ping"""
    assert _engine_options("sqlite://") == {"connect_args": {"check_same_thread": False}}
    assert _engine_options("postgresql://u:p@db/routeboard") == {"pool_pre_ping": True}
