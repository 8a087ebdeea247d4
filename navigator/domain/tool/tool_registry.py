from typing import Dict, List, Any, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from .tool_executor import ToolExecutor, ToolHandler
from .tool_validator import ToolParameterValidator

logger = structlog.get_logger(__name__)


class ToolDefinition(BaseModel):
    """Named, schema-described read tool"""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameter_schema: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})
    category: str = "general"

    def to_openai_tool(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameter_schema,
            },
        }


class ToolRegistry:
    """Registry for managing available tools.

    Tools are registered once at process start and only read afterwards.
    """

    def __init__(self, executor: Optional[ToolExecutor] = None):
        self.tools: Dict[str, ToolDefinition] = {}
        self.handlers: Dict[str, ToolHandler] = {}
        self.tool_categories: Dict[str, List[str]] = {}
        self.executor = executor or ToolExecutor()

    def register_tool(self, definition: ToolDefinition, handler: ToolHandler) -> None:
        """Register a new tool"""

        if definition.name in self.tools:
            raise ValueError(f"Tool already registered: {definition.name}")

        self.tools[definition.name] = definition
        self.handlers[definition.name] = handler
        self.tool_categories.setdefault(definition.category, []).append(definition.name)

        logger.debug("Registered tool", tool_name=definition.name, category=definition.category)

    def get_available_tools(self) -> List[ToolDefinition]:
        """Get all available tools"""

        return list(self.tools.values())

    def get_tool_info(self, name: str) -> Optional[ToolDefinition]:
        """Get information about a specific tool"""

        return self.tools.get(name)

    def get_tools_by_category(self, category: str) -> List[ToolDefinition]:
        """Get tools by category"""

        names = self.tool_categories.get(category, [])
        return [self.tools[name] for name in names if name in self.tools]

    def openai_tools(self) -> List[Dict[str, Any]]:
        """Tool catalog in the function-calling format sent to the model"""

        return [tool.to_openai_tool() for tool in self.tools.values()]

    async def dispatch(self, tool_name: str, arguments: Any, tool_call_id: Optional[str] = None) -> Any:
        """Run a tool and return its result, or ``{"error": reason}``. Never raises."""

        definition = self.tools.get(tool_name)
        if definition is None:
            logger.warning("Unknown tool requested", tool_name=tool_name, tool_call_id=tool_call_id)
            return {"error": f"{tool_name} not implemented"}

        validation = ToolParameterValidator.validate_tool_call(definition.parameter_schema, arguments)
        if not validation.is_valid:
            logger.warning(
                "Rejected tool arguments",
                tool_name=tool_name,
                tool_call_id=tool_call_id,
                errors=validation.errors,
            )
            return {"error": f"Invalid arguments for {tool_name}: {'; '.join(validation.errors)}"}

        result = await self.executor.execute_tool(
            tool_name,
            self.handlers[tool_name],
            validation.arguments,
            tool_call_id=tool_call_id,
        )
        return result.to_payload()
