# app/constants/activity_codes.py

from enum import Enum


class ActivityCode(str, Enum):
    # quotes
    CREATE_QUOTE = "CREATE_QUOTE"
    UPDATE_QUOTE = "UPDATE_QUOTE"
    DELETE_QUOTE = "DELETE_QUOTE"
    CHANGE_QUOTE_STATUS = "CHANGE_QUOTE_STATUS"
    APPROVE_QUOTE = "APPROVE_QUOTE"
    REJECT_QUOTE = "REJECT_QUOTE"
    REGISTER_PROPOSAL = "REGISTER_PROPOSAL"
    MARK_VISIT_OVERDUE = "MARK_VISIT_OVERDUE"

    # approvals
    CREATE_APPROVAL_LEVEL = "CREATE_APPROVAL_LEVEL"
    UPDATE_APPROVAL_LEVEL = "UPDATE_APPROVAL_LEVEL"
    REQUEST_APPROVAL = "REQUEST_APPROVAL"
    AUTO_APPROVE_QUOTE = "AUTO_APPROVE_QUOTE"

    # payments
    CREATE_PAYMENT = "CREATE_PAYMENT"
    UPDATE_PAYMENT_STATUS = "UPDATE_PAYMENT_STATUS"
