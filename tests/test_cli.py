"""
Tests for the Typer CLI (API stubbed with MockTransport, AI stubbed with mock).
"""

from unittest import mock

import httpx
import pytest
from typer.testing import CliRunner

from cli import doctor
from cli import main as cli_main
from core.config import write_user_env_vars
from core.domain.reports import ScheduleResult
from tests.conftest import json_response

runner = CliRunner()


@pytest.fixture
def stub_api(monkeypatch, settings, make_client):
    """Routes the CLI's ResourceClient to a MockTransport handler."""

    def _install(handler):
        monkeypatch.setattr(cli_main, "AppSettings", lambda: settings)
        monkeypatch.setattr(cli_main, "ResourceClient", lambda _settings: make_client(handler))

    return _install


def test_courses_list(stub_api):
    body = {"items": [{"id": "c1", "name": "Python Basics", "code": "PY1"}], "totalCount": 1}
    stub_api(lambda request: json_response(200, body))

    result = runner.invoke(cli_main.app, ["courses", "list"])

    assert result.exit_code == 0, result.output
    assert "Python Basics" in result.output
    assert "PY1" in result.output


def test_lessons_list_empty_course(stub_api):
    stub_api(lambda request: json_response(404, {"message": "No lessons"}))

    result = runner.invoke(cli_main.app, ["lessons", "list", "c1"])

    assert result.exit_code == 0, result.output
    assert "No lessons yet." in result.output


def test_missing_course_exits_with_error(stub_api):
    stub_api(lambda request: json_response(404))

    result = runner.invoke(cli_main.app, ["courses", "show", "does-not-exist"])

    assert result.exit_code == 1
    assert "not-found" in result.output


def test_delete_courses_requires_confirmation(stub_api):
    seen: list[httpx.Request] = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200)

    stub_api(handler)

    aborted = runner.invoke(cli_main.app, ["courses", "delete", "c1", "c2"], input="n\n")
    assert aborted.exit_code != 0
    assert seen == []

    result = runner.invoke(cli_main.app, ["courses", "delete", "c1", "c2", "--yes"])
    assert result.exit_code == 0, result.output
    assert len(seen) == 1
    assert seen[0].url.path == "/api/Courses/soft-delete"


def test_schedule_prints_suggestion(monkeypatch):
    fake = mock.AsyncMock(
        return_value=ScheduleResult(scheduled_time="Mon 9-11", classroom="Room A", reasoning="Free slot", model="m")
    )
    monkeypatch.setattr(cli_main, "schedule_class", fake)

    result = runner.invoke(
        cli_main.app,
        [
            "schedule",
            "--class-name", "Python 101",
            "--instructor", "Mon 9-12",
            "--classroom", "Room A",
            "--duration", "2 hours",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Room A" in result.output
    request = fake.await_args.args[0]
    assert request.class_name == "Python 101"


def test_doctor_run(monkeypatch, settings):
    async def fake_check(_settings):
        return True, "HTTP 200"

    monkeypatch.setattr(doctor, "AppSettings", lambda: settings)
    monkeypatch.setattr(doctor, "_check_http", fake_check)

    result = runner.invoke(cli_main.app, ["doctor", "run"])

    assert result.exit_code == 0, result.output
    assert "API connectivity" in result.output
    assert "HTTP 200" in result.output


def test_doctor_setup_ai_writes_user_env(monkeypatch, tmp_path):
    env_path = tmp_path / ".env"
    monkeypatch.setattr(doctor, "write_user_env_vars", lambda values: write_user_env_vars(values, env_path))

    result = runner.invoke(cli_main.app, ["doctor", "setup-ai"], input="openai\n\n\nsk-test\n")

    assert result.exit_code == 0, result.output
    content = env_path.read_text(encoding="utf-8")
    assert "QLDT_AI_API_KEY=sk-test" in content
    assert "QLDT_AI_MODEL=gpt-4o-mini" in content
