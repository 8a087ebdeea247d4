import structlog
import logging
import sys
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import os


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    service_name: str = "project-navigator"
) -> None:
    """Configure structlog on top of stdlib logging.

    ``log_format`` is ``json`` for machine-readable output, anything else
    selects the console renderer.
    """

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO)
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        add_service_context,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(
        service=service_name,
        environment=os.getenv("ENVIRONMENT", "development"),
    )


def add_service_context(logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Stamp every entry with a UTC timestamp and the request-scoped ids"""

    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())

    # request_id / project_id are bound by the API route for one request
    bound = structlog.contextvars.get_contextvars()
    for key in ("request_id", "project_id"):
        if key in bound:
            event_dict.setdefault(key, bound[key])

    return event_dict


class NavigatorLogger:
    """Structured events for tools, graph routing and memory"""

    def __init__(self, name: str):
        self.logger = structlog.get_logger(name)

    def log_tool_execution(
        self,
        tool_name: str,
        tool_call_id: Optional[str],
        input_data: Dict[str, Any],
        duration_ms: Optional[float] = None,
        success: bool = True,
        error: Optional[str] = None
    ):
        log = self.logger.info if success else self.logger.warning
        log(
            "tool_execution",
            tool_name=tool_name,
            tool_call_id=tool_call_id,
            input_data=input_data,
            duration_ms=duration_ms,
            success=success,
            error=error
        )

    def log_workflow_transition(
        self,
        project_id: str,
        from_node: str,
        to_node: str,
        condition: Optional[str] = None,
    ):
        self.logger.info(
            "workflow_transition",
            project_id=project_id,
            from_node=from_node,
            to_node=to_node,
            condition=condition,
        )

    def log_memory_event(
        self,
        project_id: str,
        action: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.logger.info(
            "memory_event",
            project_id=project_id,
            action=action,
            **(details or {})
        )


navigator_logger = NavigatorLogger("navigator")


class MetricsCollector:
    """In-process latency and counter aggregates, echoed to the debug log"""

    def __init__(self):
        self.latencies: Dict[str, Dict[str, float]] = {}
        self.counters: Dict[str, int] = {}

    def record_latency(self, operation: str, duration_ms: float):
        stats = self.latencies.setdefault(
            operation, {"count": 0, "total_ms": 0.0, "min_ms": duration_ms, "max_ms": duration_ms}
        )
        stats["count"] += 1
        stats["total_ms"] += duration_ms
        stats["min_ms"] = min(stats["min_ms"], duration_ms)
        stats["max_ms"] = max(stats["max_ms"], duration_ms)

        navigator_logger.logger.debug("metric", metric_type="latency", operation=operation, duration_ms=duration_ms)

    def increment_counter(self, name: str, value: int = 1):
        self.counters[name] = self.counters.get(name, 0) + value

        navigator_logger.logger.debug("metric", metric_type="counter", name=name, value=value)

    def get_metrics_summary(self) -> Dict[str, Any]:
        """Averages per latency operation plus raw counters"""

        latency = {
            operation: {
                "count": stats["count"],
                "avg_ms": stats["total_ms"] / stats["count"],
                "min_ms": stats["min_ms"],
                "max_ms": stats["max_ms"],
            }
            for operation, stats in self.latencies.items()
        }
        return {"latency": latency, "counters": dict(self.counters)}


metrics = MetricsCollector()
