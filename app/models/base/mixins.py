from sqlalchemy import Column, Boolean, DateTime, String
from sqlalchemy.sql import func


class TimestampMixin:
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        onupdate=func.now()
    )


class SoftDeleteMixin:
    is_deleted = Column(Boolean, default=False, nullable=False)


class AuditMixin:
    """
    Actor columns. Identities are issued by the external auth provider,
    so they are stored as snapshots rather than foreign keys.
    """

    created_by_id = Column(String(64), nullable=True, index=True)
    created_by_name = Column(String(150), nullable=True)
    updated_by_id = Column(String(64), nullable=True, index=True)
    updated_by_name = Column(String(150), nullable=True)

    def stamp_created(self, actor) -> None:
        self.created_by_id = actor.id
        self.created_by_name = actor.username
        self.stamp_updated(actor)

    def stamp_updated(self, actor) -> None:
        self.updated_by_id = actor.id
        self.updated_by_name = actor.username
