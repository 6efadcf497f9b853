from sqlalchemy import Column, Integer, String, Index
from app.core.db import Base
from app.models.base.mixins import TimestampMixin


class ActivityLog(Base, TimestampMixin):
    """Immutable audit log. APPEND-ONLY. Never updated, never deleted."""

    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True)
    actor_id = Column(String(64), nullable=True, index=True)
    actor_name_snapshot = Column(String(150), nullable=False, index=True)
    message = Column(String, nullable=False)

    __table_args__ = (Index("ix_activity_logs_actor_created", "actor_id", "created_at"),)

    def __repr__(self):
        return f"<ActivityLog id={self.id} actor={self.actor_name_snapshot}>"
