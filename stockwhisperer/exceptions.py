class AppError(Exception):
    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} '{resource_id}' not found", code="NOT_FOUND")


class ValidationError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class ConflictError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")


class UpstreamError(AppError):
    """A provider call that failed at the transport or payload level."""

    def __init__(self, function: str, symbol: str, reason: str):
        self.function = function
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"{function} for '{symbol}' failed: {reason}", code="UPSTREAM_ERROR")
