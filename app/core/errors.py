class ErrorKind:
    VALIDATION = "validation"
    CONFLICT = "conflict"
    LOCKING = "locking"
    DOWNSTREAM = "downstream"


class EngineError(Exception):
    status_code: int = 400
    error_code: str = "ENGINE_ERROR"
    kind: str = ErrorKind.VALIDATION
    message: str = "Request rejected"

    def __init__(self, message: str | None = None, **details):
        if message:
            self.message = message
        self.details = details
        super().__init__(self.message)


class InvalidDateRange(EngineError):
    status_code = 400
    error_code = "INVALID_DATE_RANGE"
    message = "Invalid date range"


class DiscountExceedsLimit(EngineError):
    status_code = 400
    error_code = "DISCOUNT_EXCEEDS_LIMIT"
    message = "Discount exceeds the allowed limit"


class InvalidPolicyValue(EngineError):
    status_code = 400
    error_code = "INVALID_POLICY_VALUE"
    message = "Policy value must be between 0 and 100"


class NotFound(EngineError):
    status_code = 404
    error_code = "NOT_FOUND"
    message = "Requested resource not found"


class Forbidden(EngineError):
    status_code = 403
    error_code = "FORBIDDEN"
    message = "Access denied"


class DateRangeUnavailable(EngineError):
    status_code = 409
    error_code = "DATE_RANGE_UNAVAILABLE"
    kind = ErrorKind.CONFLICT
    message = "Selected dates are no longer available"


class BillboardUnavailable(EngineError):
    status_code = 409
    error_code = "BILLBOARD_UNAVAILABLE"
    kind = ErrorKind.CONFLICT
    message = "Billboard is not open for booking"


class InvalidStateTransition(EngineError):
    status_code = 409
    error_code = "INVALID_STATE_TRANSITION"
    kind = ErrorKind.CONFLICT
    message = "Booking cannot move to the requested state"


class AlreadyLocked(EngineError):
    status_code = 409
    error_code = "ALREADY_LOCKED"
    kind = ErrorKind.LOCKING
    message = "Booking price is locked"


class InvalidPrice(EngineError):
    status_code = 400
    error_code = "INVALID_PRICE"
    message = "Price per day must be greater than zero"
