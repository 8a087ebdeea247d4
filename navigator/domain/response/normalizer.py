"""
Projection of untrusted model text onto the navigator response contract.

Every fallback for a missing or malformed field lives here; callers always
receive a fully populated NavigatorResponse.
"""

import json
from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from navigator.domain.errors import ParseError
from navigator.domain.models import Guidance, Mode, NavigatorResponse, PlanStep

logger = structlog.get_logger(__name__)


def normalize(raw_text: Optional[str], requested_mode: Mode) -> NavigatorResponse:
    """Build a NavigatorResponse from the final completion text.

    A JSON object is projected field by field, each absent or invalid field
    falling back to its default. Anything else becomes a plain message.
    """
    raw_text = raw_text or ""

    try:
        parsed = _parse_object(raw_text)
    except ParseError as e:
        logger.info("Model output is not structured", reason=e.message, length=len(raw_text))
        return NavigatorResponse(mode=requested_mode, message=raw_text)

    return NavigatorResponse(
        mode=_mode(parsed.get("mode"), requested_mode),
        message=_string(parsed.get("message"), raw_text),
        questions=_string_list(parsed.get("questions")),
        analysis=parsed["analysis"] if isinstance(parsed.get("analysis"), dict) else {},
        plan=_plan(parsed.get("plan")),
        guidance=_guidance(parsed.get("guidance")),
    )


def _parse_object(raw_text: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(raw_text.strip())
    except ValueError as e:
        raise ParseError(f"Invalid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise ParseError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def _mode(value: Any, fallback: Mode) -> Mode:
    try:
        return Mode(value)
    except (ValueError, TypeError):
        return fallback


def _string(value: Any, fallback: str) -> str:
    return value if isinstance(value, str) else fallback


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _plan(value: Any) -> List[PlanStep]:
    if not isinstance(value, list):
        return []

    steps = []
    for item in value:
        try:
            steps.append(PlanStep.model_validate(item))
        except PydanticValidationError:
            logger.debug("Dropped invalid plan step", step=item)
    return steps


def _guidance(value: Any) -> Guidance:
    if not isinstance(value, dict):
        return Guidance()

    next_priority = value.get("next_priority")
    return Guidance(
        warnings=_string_list(value.get("warnings")),
        best_practices=_string_list(value.get("best_practices")),
        meta_cognition_prompts=_string_list(value.get("meta_cognition_prompts")),
        next_priority=next_priority if isinstance(next_priority, str) and next_priority else None,
    )
