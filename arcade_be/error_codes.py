class ErrorCodes:
    """String error codes returned in the `error_code` field of error responses."""
    GENERIC_ERROR = "GENERIC_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    RATE_LIMITED = "RATE_LIMITED"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
