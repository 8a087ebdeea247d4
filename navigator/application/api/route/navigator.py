# REST endpoint for navigator turns
import uuid

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from navigator.application.api.schema.requests import parse_navigator_request
from navigator.domain.errors import ModelError, ValidationError

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/api/navigator")
async def navigator_endpoint(request: Request):
    """Run one navigator turn and return the response contract"""

    container = request.app.state.container
    structlog.contextvars.bind_contextvars(request_id=str(uuid.uuid4()))

    try:
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError("Request body must be valid JSON")

        navigator_request = parse_navigator_request(body)
        structlog.contextvars.bind_contextvars(project_id=navigator_request.project_id)

        result = await container.agent.run(
            user_message=navigator_request.user_message,
            project_id=navigator_request.project_id,
            mode=navigator_request.mode,
            user_id=navigator_request.user_id or container.settings.default_user_id,
        )
        return JSONResponse(result.to_payload())

    except ValidationError as e:
        logger.info("Rejected navigator request", error=e.message, code=e.code)
        return JSONResponse(e.to_dict(), status_code=e.status_code)
    except ModelError as e:
        logger.error("Navigator model failure", error=e.message, code=e.code)
        return JSONResponse({"error": "Navigator failed"}, status_code=500)
    except Exception as e:
        logger.exception("Navigator route error", error=str(e))
        return JSONResponse({"error": "Navigator failed"}, status_code=500)
    finally:
        structlog.contextvars.unbind_contextvars("request_id", "project_id")
