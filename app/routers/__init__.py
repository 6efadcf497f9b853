# app/routers/__init__.py

from .quotes.quote_router import router as quote_router
from .quotes.approval_router import router as approval_router
from .payments.payment_router import router as payment_router
from .support.activity_router import router as activity_router


__all__ = [
"quote_router",
"approval_router",
"payment_router",
"activity_router",
]
