from rangecore.exceptions import ConfigError, NotFoundError, RangeCoreError, ValidationError

__version__ = "1.0.0"

__all__ = [
    "ConfigError",
    "NotFoundError",
    "RangeCoreError",
    "ValidationError",
    "__version__",
]
