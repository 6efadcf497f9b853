from fastapi import HTTPException
from app.constants.error_codes import ErrorCode


class AppException(HTTPException):
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.details = details

    def to_payload(self) -> dict:
        return {
            "success": False,
            "message": self.detail,
            "error_code": self.error_code,
            "details": self.details,
        }


class TransitionNotAllowed(AppException):
    """Raised by write paths when the status machine refuses a move."""

    def __init__(self, from_status: str, to_status: str):
        super().__init__(
            409,
            "This action is not permitted on a quote in its current status",
            ErrorCode.QUOTE_INVALID_TRANSITION,
            details={"from_status": from_status, "to_status": to_status},
        )
