"""One-time backfill of driver_route_order from clients.assigned_driver_id (run after migration 002)"""
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
        inserted = reconciler.backfill_route_order(db)
        store.commit(db, "backfill_route_order")
        print(f"Done. Total new rows inserted: {inserted}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
