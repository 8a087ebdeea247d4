"""
Built-in read tools exposed to the model.

Both are stubs that return realistic shapes; swap the handlers for a real
simulator bridge or search backend without touching the schemas.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from urllib.parse import quote_plus

from navigator.domain.errors import ToolError
from .tool_executor import ToolExecutor
from .tool_registry import ToolDefinition, ToolRegistry


GET_SIMULATOR_STATE = ToolDefinition(
    name="get_simulator_state",
    description=(
        "Retrieve the latest simulator state including robot pose, sensor readings, "
        "and controller status for debugging."
    ),
    parameter_schema={
        "type": "object",
        "properties": {
            "detail_level": {
                "type": "string",
                "enum": ["summary", "full"],
                "description": "Optional level of detail: summary or full",
                "default": "summary",
            },
        },
        "additionalProperties": False,
    },
    category="simulator",
)


WEB_SEARCH = ToolDefinition(
    name="web_search",
    description=(
        "Perform a lightweight web search to gather relevant references for robotics "
        "topics, libraries, or datasheets."
    ),
    parameter_schema={
        "type": "object",
        "properties": {
            "query": {"type": "string", "minLength": 1, "description": "Search query or keywords"},
            "limit": {
                "type": "integer",
                "minimum": 1,
                "maximum": 10,
                "default": 3,
                "description": "Number of results to return",
            },
        },
        "required": ["query"],
        "additionalProperties": False,
    },
    category="search",
)


async def get_simulator_state(arguments: Dict[str, Any]) -> Dict[str, Any]:
    detail = arguments.get("detail_level", "summary")
    state: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "pose": {"x": 1.2, "y": 0.5, "heading_deg": 45},
        "sensors": {
            "line_sensors": [0.12, 0.08, 0.15, 0.1],
            "imu": {"roll": 0.02, "pitch": -0.01, "yaw_rate": 0.12},
            "distance": {"front": 0.35, "left": 0.42, "right": 0.4},
        },
        "controller": {
            "mode": "line_follow",
            "target_speed_mps": 0.4,
            "pid": {"kp": 0.9, "ki": 0.03, "kd": 0.08},
        },
        "note": "Stubbed simulator state.",
    }

    if detail == "full":
        state["controller"]["telemetry"] = [
            {
                "t": round(idx * 0.02, 2),
                "error": round(math.sin(idx / 2) * 0.05, 4),
                "control": round(0.2 + idx * 0.01, 2),
            }
            for idx in range(10)
        ]

    return state


async def web_search(arguments: Dict[str, Any]) -> Dict[str, Any]:
    query = arguments["query"].strip()
    if not query:
        raise ToolError("query is blank")
    limit = arguments.get("limit", 3)
    results = [
        {
            "title": f"Result {idx} for {query}",
            "url": f"https://example.com/search?q={quote_plus(query)}&n={idx}",
            "snippet": "Stubbed search result.",
        }
        for idx in range(1, limit + 1)
    ]
    return {"query": query, "results": results}


def create_default_registry(executor: Optional[ToolExecutor] = None) -> ToolRegistry:
    """Registry populated with the built-in read tools"""

    registry = ToolRegistry(executor=executor)
    registry.register_tool(GET_SIMULATOR_STATE, get_simulator_state)
    registry.register_tool(WEB_SEARCH, web_search)
    return registry
