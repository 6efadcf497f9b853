# app/constants/error_codes.py

from enum import Enum


class ErrorCode(str, Enum):
    # ---------------- GENERIC ----------------
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # ---------------- QUOTES ----------------
    QUOTE_NOT_FOUND = "QUOTE_NOT_FOUND"
    QUOTE_INVALID_TRANSITION = "QUOTE_INVALID_TRANSITION"
    QUOTE_INVALID_STATE = "QUOTE_INVALID_STATE"
    QUOTE_LOCKED = "QUOTE_LOCKED"
    QUOTE_VERSION_CONFLICT = "QUOTE_VERSION_CONFLICT"
    QUOTE_CANNOT_DELETE = "QUOTE_CANNOT_DELETE"

    # ---------------- APPROVALS ----------------
    APPROVAL_NOT_FOUND = "APPROVAL_NOT_FOUND"
    APPROVAL_LEVEL_NOT_FOUND = "APPROVAL_LEVEL_NOT_FOUND"
    APPROVAL_ALREADY_PENDING = "APPROVAL_ALREADY_PENDING"
    APPROVAL_INVALID_STATE = "APPROVAL_INVALID_STATE"
    APPROVER_NOT_ALLOWED = "APPROVER_NOT_ALLOWED"

    # ---------------- PAYMENTS ----------------
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    PAYMENT_ALREADY_EXISTS = "PAYMENT_ALREADY_EXISTS"
    PAYMENT_INVALID_STATE = "PAYMENT_INVALID_STATE"
