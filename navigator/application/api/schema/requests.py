from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from navigator.domain.errors import ValidationError
from navigator.domain.models import Mode


class NavigatorRequest(BaseModel):
    """Navigator request body; camelCase on the wire"""
    model_config = ConfigDict(populate_by_name=True)

    user_message: str = Field(alias="userMessage")
    project_id: str = Field(alias="projectId")
    mode: Mode = Mode.LIVE_GUIDANCE
    user_id: Optional[str] = Field(None, alias="userId")


def parse_navigator_request(body: Any) -> NavigatorRequest:
    """Validate a raw request body before any external call is made.

    Raises:
        ValidationError: if userMessage or projectId is missing or blank, or
            mode is not one of the known modes.
    """
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    user_message = body.get("userMessage")
    project_id = body.get("projectId")
    if not _present(user_message) or not _present(project_id):
        raise ValidationError("Missing userMessage or projectId")

    mode = body.get("mode") or Mode.LIVE_GUIDANCE.value
    try:
        mode = Mode(mode)
    except (ValueError, TypeError):
        allowed = ", ".join(m.value for m in Mode)
        raise ValidationError(f"Unknown mode {mode!r}; expected one of: {allowed}")

    user_id = body.get("userId")
    return NavigatorRequest(
        user_message=user_message,
        project_id=project_id.strip(),
        mode=mode,
        user_id=user_id if _present(user_id) else None,
    )


def _present(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())
