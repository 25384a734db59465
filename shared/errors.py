"""
Shared error handling for the Casbin Redis adapter.
"""

from typing import Dict, Any, Optional


class AdapterException(Exception):
    """Base exception for the policy adapter."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain error payload."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(AdapterException):
    """Invalid adapter construction input."""

    def __init__(self, message: str = "Invalid adapter configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIG_ERROR", message, details)


class TransportError(AdapterException):
    """Connection, pool or request failure."""

    def __init__(self, message: str = "Redis request failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("TRANSPORT_ERROR", message, details)


class DecodeError(AdapterException):
    """A stored record is not in canonical form."""

    def __init__(self, message: str = "Malformed policy record", details: Optional[Dict[str, Any]] = None):
        super().__init__("DECODE_ERROR", message, details)


class ArityError(AdapterException):
    """Parallel rule lists of different lengths."""

    def __init__(self, message: str = "Rule lists must have the same length", details: Optional[Dict[str, Any]] = None):
        super().__init__("ARITY_ERROR", message, details)


class FilterTypeError(AdapterException):
    """Unsupported filter value passed to a filtered load."""

    def __init__(self, message: str = "Invalid filter type", details: Optional[Dict[str, Any]] = None):
        super().__init__("FILTER_TYPE_ERROR", message, details)
