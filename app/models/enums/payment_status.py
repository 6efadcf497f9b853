# app/models/enums/payment_status.py
import enum


class PaymentStatus(str, enum.Enum):
    pending = "pending"
    in_escrow = "in_escrow"
    waiting_confirmation = "waiting_confirmation"
    delivered = "delivered"
    paid = "paid"
    disputed = "disputed"
    cancelled = "cancelled"
