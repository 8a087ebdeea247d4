from .builtin_tools import create_default_registry
from .tool_executor import ToolExecutor, ToolResult
from .tool_registry import ToolDefinition, ToolRegistry
from .tool_validator import ToolParameterValidator

__all__ = [
    "create_default_registry",
    "ToolDefinition",
    "ToolExecutor",
    "ToolParameterValidator",
    "ToolRegistry",
    "ToolResult",
]
