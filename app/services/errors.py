class WageringError(Exception):
    """Base for recoverable engine errors; none of them leave state mutated."""

    status_code = 400
    code = "WAGER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(WageringError, ValueError):
    code = "VALIDATION_ERROR"


class InsufficientFunds(WageringError):
    code = "INSUFFICIENT_FUNDS"

    def __init__(self, message: str = "Insufficient balance"):
        super().__init__(message)


class SessionAlreadyActive(WageringError):
    status_code = 409
    code = "SESSION_ALREADY_ACTIVE"


class NoActiveSession(WageringError):
    status_code = 404
    code = "NO_ACTIVE_SESSION"


class NothingToCashOut(WageringError):
    code = "NOTHING_TO_CASH_OUT"


class InvalidMove(WageringError):
    code = "INVALID_MOVE"
