"""
Tests for the AI scheduling adapter (OpenAI SDK stubbed).
"""

import asyncio
from types import SimpleNamespace
from unittest import mock

import pytest

from adapters.ai_scheduler import _extract_json_object, build_user_prompt, parse_schedule, schedule_class
from core.domain.reports import ScheduleRequest
from core.errors import ClassifiedError, ErrorKind

REQUEST = ScheduleRequest(
    class_name="Python 101",
    instructor_availability="Mon 9-12",
    classroom_availability="Room A Mon 9-17",
    class_duration="2 hours",
)


def _fake_client(content: str) -> mock.Mock:
    response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])
    client = mock.Mock()
    client.chat.completions.create = mock.AsyncMock(return_value=response)
    return client


@pytest.fixture
def ai_settings(settings):
    return settings.model_copy(update={"ai_api_key": "sk-test", "ai_model": "test-model"})


def test_extract_json_from_fence():
    text = 'Sure!\n```json\n{"scheduledTime": "Mon 9-11", "classroom": "A"}\n```'
    assert _extract_json_object(text) == '{"scheduledTime": "Mon 9-11", "classroom": "A"}'


def test_extract_json_rejects_prose():
    with pytest.raises(ValueError):
        _extract_json_object("no json here")


def test_prompt_contains_constraints():
    prompt = build_user_prompt(REQUEST)
    assert "Instructor Availability: Mon 9-12" in prompt
    assert "Existing Schedule: None" in prompt
    assert "Class Name: Python 101" in prompt


def test_parse_schedule():
    result = parse_schedule('{"scheduledTime": " Mon 9-11 ", "classroom": "A", "reasoning": "free"}', model="m")
    assert (result.scheduled_time, result.classroom, result.reasoning, result.model) == ("Mon 9-11", "A", "free", "m")


def test_schedule_class_single_call(ai_settings):
    client = _fake_client('{"scheduledTime": "Mon 9-11", "classroom": "Room A", "reasoning": "No conflicts"}')
    result = asyncio.run(schedule_class(REQUEST, settings=ai_settings, client=client))

    assert result.classroom == "Room A"
    assert result.model == "test-model"
    client.chat.completions.create.assert_awaited_once()
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["messages"][0]["role"] == "system"


def test_invalid_answer_is_server_error(ai_settings):
    client = _fake_client("I cannot help with that.")
    with pytest.raises(ClassifiedError) as excinfo:
        asyncio.run(schedule_class(REQUEST, settings=ai_settings, client=client))
    assert excinfo.value.kind is ErrorKind.SERVER
    client.chat.completions.create.assert_awaited_once()


def test_missing_fields_is_server_error(ai_settings):
    client = _fake_client('{"classroom": "A"}')
    with pytest.raises(ClassifiedError) as excinfo:
        asyncio.run(schedule_class(REQUEST, settings=ai_settings, client=client))
    assert excinfo.value.kind is ErrorKind.SERVER


def test_missing_api_key_is_server_error(settings):
    with pytest.raises(ClassifiedError) as excinfo:
        asyncio.run(schedule_class(REQUEST, settings=settings.model_copy(update={"ai_api_key": None})))
    assert excinfo.value.kind is ErrorKind.SERVER
    assert excinfo.value.detail.cause == "missing_api_key"
