class RangeCoreError(Exception):
    """Base exception for rangecore errors."""
    pass

class ConfigError(RangeCoreError):
    """Configuration loading specific errors."""
    pass

class NotFoundError(RangeCoreError, LookupError):
    """Requested drill type or template does not exist."""
    pass

class ValidationError(RangeCoreError, ValueError):
    def __init__(self, message: str, *, param: str | None = None, errors: list[str] | None = None):
        super().__init__(message)
        self.param = param
        self.errors = errors or [message]
