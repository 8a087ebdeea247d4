"""
Error taxonomy for the navigator core.

Only ValidationError and ModelError ever reach a caller. StorageError,
ToolError and ParseError are absorbed at the boundary that raised them.
"""

from typing import Any, Dict, Optional


class NavigatorError(Exception):
    """Base class for all navigator errors"""

    code: str = "navigator_error"
    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(NavigatorError):
    """Malformed or missing request fields"""

    code = "validation_error"
    status_code = 400


class ModelError(NavigatorError):
    """Completion call failed, timed out, or produced no usable choice"""

    code = "model_error"


class StorageError(NavigatorError):
    """Embedding or persistence failure"""

    code = "storage_error"


class ToolError(NavigatorError):
    """Tool handler failure, converted to an error payload for the model"""

    code = "tool_error"


class ParseError(NavigatorError):
    """Model output could not be parsed as a navigator response"""

    code = "parse_error"
