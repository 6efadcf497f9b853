# Quotes
from app.models.quotes.quote_models import Quote, QuoteStatusHistory
from app.models.quotes.approval_models import ApprovalLevel, Approval

# Payments
from app.models.payments.payment_models import Payment

# Support
from app.models.support.activity_models import ActivityLog
