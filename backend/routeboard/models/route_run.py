"""Route run (assignment snapshot) model"""
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from routeboard.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RouteRun(Base):
    """Saved driver -> stop assignment for a day"""

    __tablename__ = "route_runs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    day: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    snapshot: Mapped[list] = mapped_column(JSON, nullable=False)
    # set client-side so runs saved within the same second still order correctly
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), index=True
    )
