"""Prompt templates for the navigator context."""

from typing import List, Optional

from navigator.domain.models import Mode, ProjectPlan, RecalledFragment


SYSTEM_PROMPT = (
    "You are \"Project Navigator\", an expert AI project mentor.\n"
    "You understand the user, diagnose their proficiency, research their tools, "
    "create a custom plan, and guide them live while preventing mistakes.\n"
    "You output ONLY valid JSON with:\n"
    "{\n"
    '  "mode": "",\n'
    '  "message": "",\n'
    '  "questions": [],\n'
    '  "analysis": {},\n'
    '  "plan": [],\n'
    '  "guidance": {}\n'
    "}\n\n"
    "Your modes:\n"
    "- assessment_questions\n"
    "- assessment_feedback\n"
    "- project_plan\n"
    "- live_guidance\n\n"
    "plan items contain: title, description, prerequisites[], resources[]\n\n"
    "guidance contains:\n"
    "- warnings[]\n"
    "- best_practices[]\n"
    "- meta_cognition_prompts[]\n"
    "- next_priority\n\n"
    "Think like a robotics expert with experience in Arduino, ESP32, sensors, motors, "
    "robotics logic, simulators, PID, line followers, obstacle bots, arm robots, etc.\n"
    "Use the available tools to inspect the simulator or look up references when that helps."
)


MEMORY_HEADER = "Relevant project memory (highest first):"


def render_memory_block(fragments: List[RecalledFragment]) -> Optional[str]:
    """Numbered list of recalled fragments, or None when there are none."""
    if not fragments:
        return None
    lines = [f"{idx}. {fragment.content}" for idx, fragment in enumerate(fragments, start=1)]
    return MEMORY_HEADER + "\n" + "\n".join(lines)


def render_project_block(project_id: str, mode: Mode, plan: Optional[ProjectPlan]) -> str:
    lines = [f"Project: {project_id}", f"Requested mode: {mode.value}"]
    if plan and plan.steps:
        lines.append(f"Current plan: {plan.title}" if plan.title else "Current plan:")
        for idx, step in enumerate(plan.steps, start=1):
            lines.append(f"{idx}. {step.title}: {step.description}")
    return "\n".join(lines)
