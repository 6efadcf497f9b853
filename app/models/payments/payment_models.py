from sqlalchemy import Column, Integer, Numeric, String, ForeignKey, Enum, CheckConstraint, Index, text
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, AuditMixin
from app.models.enums.payment_status import PaymentStatus

# at most one payment per quote that is not cancelled
ACTIVE_PAYMENT_CONDITION = text("status != 'cancelled'")


class Payment(Base, TimestampMixin, AuditMixin):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)

    quote_id = Column(Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True)

    amount = Column(Numeric(14, 2), nullable=False)
    payment_method = Column(String(50), nullable=True)
    status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.pending, index=True)

    quote = relationship("Quote", back_populates="payments", lazy="noload")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payment_amount_positive"),
        Index(
            "uq_payments_active_quote",
            "quote_id",
            unique=True,
            postgresql_where=ACTIVE_PAYMENT_CONDITION,
            sqlite_where=ACTIVE_PAYMENT_CONDITION,
        ),
    )

    def __repr__(self):
        return f"<Payment id={self.id} amount={self.amount} status={self.status}>"
