# app/models/enums/quote_status.py
import enum


class QuoteStatus(str, enum.Enum):
    draft = "draft"
    sent = "sent"
    awaiting_visit = "awaiting_visit"
    visit_scheduled = "visit_scheduled"
    visit_confirmed = "visit_confirmed"
    visit_overdue = "visit_overdue"
    visit_partial_scheduled = "visit_partial_scheduled"
    visit_partial_confirmed = "visit_partial_confirmed"
    receiving = "receiving"          # waiting for supplier proposals
    received = "received"            # proposals arrived, NOT payment received
    ai_analyzing = "ai_analyzing"
    ai_negotiating = "ai_negotiating"
    awaiting_ai_approval = "awaiting_ai_approval"
    under_review = "under_review"
    pending_approval = "pending_approval"
    approved = "approved"
    rejected = "rejected"
    finalized = "finalized"
    cancelled = "cancelled"
    trash = "trash"
