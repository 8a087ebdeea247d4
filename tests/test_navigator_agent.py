import json

import pytest
from langchain_core.messages import HumanMessage, SystemMessage, ToolMessage

from navigator.domain.context.memory.vector_backend import InMemoryVectorBackend
from navigator.domain.context.plan_store import InMemoryPlanStore
from navigator.domain.context.prompts import MEMORY_HEADER, SYSTEM_PROMPT
from navigator.domain.errors import ModelError
from navigator.domain.models import Mode, PlanStep, ProjectPlan
from navigator.domain.orchestration.core.navigator_agent import parse_tool_arguments

from tests.helpers import FailingBackend, FailingPlanStore, FakeCompletionService, build_agent, make_completion


PLAN_JSON = json.dumps({
    "mode": "project_plan",
    "message": "Here is your plan",
    "plan": [{"title": "Step1", "description": "d"}],
})


@pytest.mark.asyncio
async def test_direct_answer_without_tools():
    completions = FakeCompletionService([make_completion(PLAN_JSON)])
    backend = InMemoryVectorBackend()
    agent = build_agent(completions, backend=backend)

    result = await agent.run("Plan my robot", "p1", Mode.PROJECT_PLAN, user_id="u1")

    assert result.response.mode == Mode.PROJECT_PLAN
    assert result.response.message == "Here is your plan"
    assert [step.title for step in result.response.plan] == ["Step1"]
    assert result.recalled == []
    assert len(completions.calls) == 1
    assert completions.calls[0]["tool_choice"] == "auto"
    assert len(completions.calls[0]["tools"]) == 2

    stored = backend.memories["p1"]
    assert [(r.owner_id, r.content) for r in stored] == [("u1", "Plan my robot"), ("assistant", "Here is your plan")]


@pytest.mark.asyncio
async def test_single_tool_round_then_final_answer():
    completions = FakeCompletionService([
        make_completion(tool_calls=[{"id": "c1", "name": "get_simulator_state", "arguments": "{}"}]),
        make_completion('{"message": "Your kp is too high"}'),
    ])
    agent = build_agent(completions)

    result = await agent.run("Why does my robot wobble?", "p1")

    assert result.response.message == "Your kp is too high"
    assert result.response.mode == Mode.LIVE_GUIDANCE
    assert len(completions.calls) == 2
    assert completions.calls[1]["tools"] is None

    transcript = completions.calls[1]["messages"]
    tool_messages = [m for m in transcript if isinstance(m, ToolMessage)]
    assert len(tool_messages) == 1
    assert tool_messages[0].tool_call_id == "c1"
    assert json.loads(tool_messages[0].content)["pose"]["heading_deg"] == 45


@pytest.mark.asyncio
async def test_every_tool_call_is_answered_in_order():
    calls = [
        {"id": "a", "name": "web_search", "arguments": '{"query": "PID tuning"}'},
        {"id": "b", "name": "launch_rocket", "arguments": "{}"},
        {"id": "c", "name": "web_search", "arguments": '{"query": "PID tuning"}'},
        {"id": "d", "name": "get_simulator_state", "arguments": "not json"},
    ]
    completions = FakeCompletionService([
        make_completion(tool_calls=calls),
        make_completion("Done"),
    ])
    agent = build_agent(completions)

    await agent.run("Help me tune", "p1")

    transcript = completions.calls[1]["messages"]
    tool_messages = [m for m in transcript if isinstance(m, ToolMessage)]
    assert [m.tool_call_id for m in tool_messages] == ["a", "b", "c", "d"]
    assert json.loads(tool_messages[1].content) == {"error": "launch_rocket not implemented"}
    assert json.loads(tool_messages[0].content) == json.loads(tool_messages[2].content)
    assert "pose" in json.loads(tool_messages[3].content)


@pytest.mark.asyncio
async def test_tool_calls_in_final_completion_are_ignored():
    completions = FakeCompletionService([
        make_completion(tool_calls=[{"id": "c1", "name": "get_simulator_state", "arguments": "{}"}]),
        make_completion("Final", tool_calls=[{"id": "c2", "name": "web_search", "arguments": '{"query": "x"}'}]),
    ])
    agent = build_agent(completions)

    result = await agent.run("Check the simulator", "p1")

    assert result.response.message == "Final"
    assert len(completions.calls) == 2


@pytest.mark.asyncio
async def test_plain_text_answer_is_wrapped():
    completions = FakeCompletionService([make_completion("I need more info")])
    agent = build_agent(completions)

    result = await agent.run("Hi", "p1", Mode.LIVE_GUIDANCE)

    assert result.response.message == "I need more info"
    assert result.response.mode == Mode.LIVE_GUIDANCE
    assert result.response.plan == []
    assert result.response.guidance.is_empty()


@pytest.mark.asyncio
async def test_memory_save_failure_does_not_change_response():
    completions = FakeCompletionService([make_completion("Keep going")])
    agent = build_agent(completions, backend=FailingBackend(fail_insert=True, fail_search=False))

    result = await agent.run("Status?", "p1")

    assert result.response.message == "Keep going"


@pytest.mark.asyncio
async def test_recall_failure_still_answers():
    completions = FakeCompletionService([make_completion("Answer")])
    agent = build_agent(completions, backend=FailingBackend())

    result = await agent.run("Status?", "p1")

    assert result.response.message == "Answer"
    assert result.recalled == []


@pytest.mark.asyncio
async def test_completion_failure_raises_model_error_and_saves_nothing():
    backend = InMemoryVectorBackend()
    agent = build_agent(FakeCompletionService([RuntimeError("upstream 502")]), backend=backend)

    with pytest.raises(ModelError):
        await agent.run("Hello", "p1")

    assert await backend.count("p1") == 0


@pytest.mark.asyncio
async def test_completion_timeout_raises_model_error():
    completions = FakeCompletionService([make_completion("late")], delay=0.5)
    agent = build_agent(completions, completion_timeout=0.01)

    with pytest.raises(ModelError):
        await agent.run("Hello", "p1")


@pytest.mark.asyncio
async def test_recalled_memory_is_injected_before_user_message():
    backend = InMemoryVectorBackend()
    first = build_agent(FakeCompletionService([make_completion("Use an L298N driver")]), backend=backend)
    await first.run("Which motor driver for my line follower?", "p1")

    completions = FakeCompletionService([make_completion("Answer")])
    second = build_agent(completions, backend=backend)
    result = await second.run("Which motor driver for my line follower?", "p1")

    messages = completions.calls[0]["messages"]
    assert isinstance(messages[0], SystemMessage) and messages[0].content == SYSTEM_PROMPT
    assert messages[1].content.startswith(MEMORY_HEADER)
    assert "Which motor driver for my line follower?" in messages[1].content
    assert isinstance(messages[-1], HumanMessage)
    assert result.recalled
    assert result.to_payload()["recalled_memory"][0]["text"] == result.recalled[0].content


@pytest.mark.asyncio
async def test_stored_plan_is_included_for_plan_modes():
    plans = InMemoryPlanStore({
        "p1": ProjectPlan(project_id="p1", title="Maze bot", steps=[PlanStep(title="Map the maze")]),
    })
    completions = FakeCompletionService([make_completion("ok")])
    agent = build_agent(completions, plan_store=plans)

    await agent.run("What next?", "p1", Mode.PROJECT_PLAN)

    project_block = completions.calls[0]["messages"][-2].content
    assert "Project: p1" in project_block
    assert "Map the maze" in project_block


@pytest.mark.asyncio
async def test_plan_store_failure_falls_back_to_default_plan():
    completions = FakeCompletionService([make_completion("ok")])
    agent = build_agent(completions, plan_store=FailingPlanStore())

    await agent.run("What next?", "p1", Mode.LIVE_GUIDANCE)

    project_block = completions.calls[0]["messages"][-2].content
    assert "Define the goal" in project_block


@pytest.mark.asyncio
async def test_assessment_modes_skip_the_plan():
    completions = FakeCompletionService([make_completion("ok")])
    agent = build_agent(completions, plan_store=InMemoryPlanStore())

    await agent.run("Quiz me", "p1", Mode.ASSESSMENT_QUESTIONS)

    project_block = completions.calls[0]["messages"][-2].content
    assert "Requested mode: assessment_questions" in project_block
    assert "Current plan" not in project_block


def test_parse_tool_arguments():
    assert parse_tool_arguments('{"query": "x"}') == {"query": "x"}
    assert parse_tool_arguments("") == {}
    assert parse_tool_arguments(None) == {}
    assert parse_tool_arguments("{broken") == {}
    assert parse_tool_arguments("[1, 2]") == {}


@pytest.mark.asyncio
async def test_empty_answer_raises_model_error_and_saves_nothing():
    backend = InMemoryVectorBackend()
    agent = build_agent(FakeCompletionService([make_completion(None)]), backend=backend)

    with pytest.raises(ModelError):
        await agent.run("Hello", "p1")

    assert await backend.count("p1") == 0


@pytest.mark.asyncio
async def test_empty_answer_after_tool_round_raises_model_error():
    completions = FakeCompletionService([
        make_completion(tool_calls=[{"id": "c1", "name": "get_simulator_state", "arguments": "{}"}]),
        make_completion("   "),
    ])
    agent = build_agent(completions)

    with pytest.raises(ModelError):
        await agent.run("Check the simulator", "p1")

    assert len(completions.calls) == 2
