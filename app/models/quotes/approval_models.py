from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Enum, JSON, Boolean, DateTime, CheckConstraint, Index
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, AuditMixin
from app.models.enums.approval_status import ApprovalStatus


class ApprovalLevel(Base, TimestampMixin, AuditMixin):
    """
    Approval rule for quotes whose total reaches ``amount_threshold``.
    ``client_name`` NULL means the level applies to every client.
    """

    __tablename__ = "approval_levels"

    id = Column(Integer, primary_key=True)
    name = Column(String(150), nullable=False)
    client_name = Column(String(255), nullable=True, index=True)

    amount_threshold = Column(Numeric(14, 2), nullable=False)
    order_level = Column(Integer, nullable=False, default=1)
    approvers = Column(JSON, nullable=False, default=list)
    active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("amount_threshold >= 0", name="ck_approval_level_threshold_non_negative"),
        Index("ix_approval_levels_active_threshold", "active", "amount_threshold"),
    )

    def __repr__(self):
        return f"<ApprovalLevel {self.name} threshold={self.amount_threshold}>"


class Approval(Base, TimestampMixin):
    """One approval request per submission of a quote."""

    __tablename__ = "approvals"

    id = Column(Integer, primary_key=True)
    quote_id = Column(Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True)
    approval_level_id = Column(Integer, ForeignKey("approval_levels.id", ondelete="SET NULL"), nullable=True)

    status = Column(Enum(ApprovalStatus), nullable=False, default=ApprovalStatus.pending, index=True)
    amount = Column(Numeric(14, 2), nullable=False)

    requested_by_id = Column(String(64), nullable=True)
    requested_by_name = Column(String(150), nullable=False)
    approver_id = Column(String(64), nullable=True, index=True)
    approver_name = Column(String(150), nullable=True)
    comments = Column(String, nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=True)

    level = relationship("ApprovalLevel", lazy="noload")

    def __repr__(self):
        return f"<Approval quote_id={self.quote_id} status={self.status}>"
