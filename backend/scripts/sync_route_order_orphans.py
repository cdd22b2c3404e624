"""Remove driver_route_order rows whose client is no longer assigned to that driver.

Run nightly or after bulk reassignments. Safe to re-run.
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from routeboard.config import get_settings
from routeboard.database import SessionLocal
from routeboard.logging_config import configure_logging
from routeboard.services import reconciler, store


def main():
    configure_logging(get_settings().log_level)
    db = SessionLocal()
    try:
        removed = reconciler.sync_orphans(db)
        store.commit(db, "sync_orphans")
        if removed:
            print(f"Removed {removed} orphan driver_route_order row(s).")
        else:
            print("No orphan driver_route_order rows to remove.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
