from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Enum, Index, CheckConstraint, Date, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin, AuditMixin
from app.models.enums.quote_status import QuoteStatus


class Quote(Base, TimestampMixin, SoftDeleteMixin, AuditMixin):
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True)
    quote_number = Column(String(50), nullable=False, unique=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(String, nullable=True)
    client_name = Column(String(255), nullable=False, index=True)

    status = Column(Enum(QuoteStatus), nullable=False, default=QuoteStatus.draft, index=True)

    suppliers_sent_count = Column(Integer, nullable=False, default=0)
    responses_count = Column(Integer, nullable=False, default=0)
    visit_date = Column(Date, nullable=True)
    total_amount = Column(Numeric(14, 2), nullable=True)

    version = Column(Integer, nullable=False, default=1)

    status_history = relationship(
        "QuoteStatusHistory",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteStatusHistory.id",
        lazy="noload",
    )
    payments = relationship("Payment", back_populates="quote", lazy="noload")

    __table_args__ = (
        Index("ix_quote_status_visit_date", "status", "visit_date"),
        CheckConstraint("suppliers_sent_count >= 0 AND responses_count >= 0", name="ck_quote_counts_non_negative"),
        CheckConstraint("total_amount IS NULL OR total_amount >= 0", name="ck_quote_total_non_negative"),
    )

    def __repr__(self):
        return f"<Quote {self.quote_number} status={self.status}>"


class QuoteStatusHistory(Base):
    """Append-only. One row per persisted status change."""

    __tablename__ = "quote_status_history"

    id = Column(Integer, primary_key=True)
    quote_id = Column(Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True)
    from_status = Column(Enum(QuoteStatus), nullable=False)
    to_status = Column(Enum(QuoteStatus), nullable=False)
    reason = Column(String, nullable=True)
    triggered_by = Column(String(150), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    quote = relationship("Quote", back_populates="status_history", lazy="noload")

    def __repr__(self):
        return f"<QuoteStatusHistory quote_id={self.quote_id} {self.from_status}->{self.to_status}>"
