import json

from navigator.domain.models import Mode, NavigatorResult
from navigator.domain.response.normalizer import normalize


def test_full_json_is_projected_field_by_field():
    raw = json.dumps({
        "mode": "project_plan",
        "message": "Here is your plan",
        "questions": ["Which board?"],
        "analysis": {"level": "beginner"},
        "plan": [{"title": "Step1", "description": "d", "prerequisites": ["none"], "resources": ["docs"]}],
        "guidance": {
            "warnings": ["Check polarity"],
            "best_practices": ["Test motors alone"],
            "meta_cognition_prompts": ["What changed?"],
            "next_priority": "Wire sensors",
        },
    })

    response = normalize(raw, Mode.LIVE_GUIDANCE)

    assert response.mode == Mode.PROJECT_PLAN
    assert response.message == "Here is your plan"
    assert response.questions == ["Which board?"]
    assert response.analysis == {"level": "beginner"}
    assert len(response.plan) == 1
    assert response.plan[0].title == "Step1"
    assert response.plan[0].prerequisites == ["none"]
    assert response.guidance.warnings == ["Check polarity"]
    assert response.guidance.next_priority == "Wire sensors"


def test_absent_fields_fall_back_to_defaults():
    raw = '{"questions": ["How fast?"]}'

    response = normalize(raw, Mode.ASSESSMENT_QUESTIONS)

    assert response.mode == Mode.ASSESSMENT_QUESTIONS
    assert response.message == raw
    assert response.questions == ["How fast?"]
    assert response.analysis == {}
    assert response.plan == []
    assert response.guidance.is_empty()


def test_plain_text_becomes_message():
    response = normalize("I need more info", Mode.LIVE_GUIDANCE)

    assert response.message == "I need more info"
    assert response.mode == Mode.LIVE_GUIDANCE
    assert response.questions == []
    assert response.analysis == {}
    assert response.plan == []
    assert response.guidance.is_empty()


def test_json_that_is_not_an_object_is_treated_as_text():
    response = normalize('["a", "b"]', Mode.PROJECT_PLAN)

    assert response.message == '["a", "b"]'
    assert response.plan == []


def test_invalid_fields_are_replaced_individually():
    raw = json.dumps({
        "mode": "freestyle",
        "message": 42,
        "questions": ["ok", 3, None],
        "analysis": ["not", "a", "mapping"],
        "plan": [{"title": "Keep"}, "junk", {"description": "no title"}],
        "guidance": {"warnings": "not a list", "next_priority": ""},
    })

    response = normalize(raw, Mode.ASSESSMENT_FEEDBACK)

    assert response.mode == Mode.ASSESSMENT_FEEDBACK
    assert response.message == raw
    assert response.questions == ["ok"]
    assert response.analysis == {}
    assert [step.title for step in response.plan] == ["Keep"]
    assert response.guidance.is_empty()


def test_normalizing_twice_gives_the_same_result():
    raw = '{"mode": "live_guidance", "message": "Tune kp first", "guidance": {"warnings": ["Hot motor"]}}'

    assert normalize(raw, Mode.PROJECT_PLAN) == normalize(raw, Mode.PROJECT_PLAN)


def test_none_and_empty_output():
    response = normalize(None, Mode.LIVE_GUIDANCE)

    assert response.message == ""
    assert response.plan == []


def test_plan_steps_keep_model_keys_without_adding_nulls():
    raw = json.dumps({
        "message": "Plan",
        "plan": [{"title": "Step1", "description": "d", "estimate": "2h"}],
    })

    response = normalize(raw, Mode.PROJECT_PLAN)
    payload = NavigatorResult(response=response).to_payload()

    assert payload["plan"] == [{"title": "Step1", "description": "d", "estimate": "2h"}]
