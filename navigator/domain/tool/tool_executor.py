# Execution with timeout & monitoring
from typing import Any, Awaitable, Callable, Dict, Optional
import asyncio
import time

from pydantic import BaseModel

from navigator.domain.errors import ToolError
from navigator.infrastructure.observability.logging import metrics, navigator_logger

ToolHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


class ToolResult(BaseModel):
    success: bool
    data: Any = None
    error: Optional[str] = None
    execution_time_ms: float = 0.0

    def to_payload(self) -> Any:
        return self.data if self.success else {"error": self.error}


class ToolExecutor:
    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    async def execute_tool(
        self,
        tool_name: str,
        handler: ToolHandler,
        parameters: Dict[str, Any],
        tool_call_id: Optional[str] = None,
    ) -> ToolResult:
        start = time.monotonic()

        try:
            data = await asyncio.wait_for(handler(parameters), timeout=self.timeout)
            result = ToolResult(success=True, data=data)

        except asyncio.TimeoutError:
            result = ToolResult(success=False, error=f"{tool_name} failed: execution timeout")
        except ToolError as e:
            result = ToolResult(success=False, error=f"{tool_name} failed: {e.message}")
        except Exception as e:
            result = ToolResult(success=False, error=f"{tool_name} failed: {e}")

        result.execution_time_ms = (time.monotonic() - start) * 1000

        navigator_logger.log_tool_execution(
            tool_name=tool_name,
            tool_call_id=tool_call_id,
            input_data=parameters,
            duration_ms=result.execution_time_ms,
            success=result.success,
            error=result.error,
        )
        metrics.record_latency(f"tool.{tool_name}", result.execution_time_ms)
        return result
