from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from navigator.application.api.route.navigator import router as navigator_router
from navigator.application.container import Container, build_container
from navigator.config import get_settings
from navigator.infrastructure.observability.logging import metrics, setup_logging

logger = structlog.get_logger(__name__)


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Create the API app; tests pass a prebuilt container"""

    if container is None:
        settings = get_settings()
        setup_logging(settings.log_level, settings.log_format, settings.service_name)
        container = build_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await container.start()
        logger.info("Navigator API started", tools=[t.name for t in container.tool_registry.get_available_tools()])
        yield
        await container.stop()
        logger.info("Navigator API shutdown")

    app = FastAPI(title="Project Navigator API", lifespan=lifespan)
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(navigator_router)

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint"""
        current = request.app.state.container
        payload = {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "tools": [tool.name for tool in current.tool_registry.get_available_tools()],
            "metrics": metrics.get_metrics_summary(),
        }
        if current.database is not None:
            payload["database"] = await current.database.health_check()
        return payload

    return app


def main() -> None:
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
