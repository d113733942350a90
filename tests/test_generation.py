from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest

from nudge import llm_client as llm_client_mod
from nudge import prompt_builders
from nudge.llm_client import LlmClient
from nudge.reminders.errors import GenerationError
from nudge.reminders.generation import LlmReminderGenerator


def _response(content: str):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content), finish_reason="stop")]
    )


@pytest.fixture
def completion_calls(monkeypatch):
    calls: list[dict] = []

    def fake_completion(**kwargs):
        calls.append(kwargs)
        return _response('[{"title": "x"}]')

    monkeypatch.setattr(llm_client_mod.litellm, "completion", fake_completion)
    return calls


def test_generate_returns_raw_content_and_sends_context(completion_calls):
    client = LlmClient(model="openai/gpt-4o-mini", api_key="k", llm_base_url="http://localhost:1234", timeout_seconds=5)
    gen = LlmReminderGenerator(client)

    text = gen.generate([("car", "last_oil_change", "don't remember")], ["Buy birthday gift"], date(2024, 6, 10))

    assert text == '[{"title": "x"}]'
    [kwargs] = completion_calls
    assert kwargs["model"] == "openai/gpt-4o-mini"
    assert kwargs["api_key"] == "k"
    assert kwargs["api_base"] == "http://localhost:1234"
    assert kwargs["timeout"] == 5
    assert "response_format" not in kwargs
    user_text = kwargs["messages"][1]["content"]
    assert "Today's date: 2024-06-10" in user_text
    assert "[car] last_oil_change: don't remember" in user_text
    assert "- Buy birthday gift" in user_text


def test_quick_add_requests_json_object_with_small_budget(completion_calls):
    gen = LlmReminderGenerator(LlmClient(model="m"), quick_add_default_due_days=3)

    gen.quick_add("dentist next tuesday", date(2024, 6, 10))

    [kwargs] = completion_calls
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["max_tokens"] == 500
    assert "api_key" not in kwargs
    assert "default: 3 days from today" in kwargs["messages"][0]["content"]
    assert '"dentist next tuesday"' in kwargs["messages"][1]["content"]


def test_transport_failure_becomes_generation_error(monkeypatch):
    def boom(**kwargs):
        raise TimeoutError("upstream timed out")

    monkeypatch.setattr(llm_client_mod.litellm, "completion", boom)
    gen = LlmReminderGenerator(LlmClient(model="m"))

    with pytest.raises(GenerationError):
        gen.generate([("home", "k", "v")], [], date(2024, 6, 10))
    with pytest.raises(GenerationError):
        gen.quick_add("anything", date(2024, 6, 10))


def test_response_content_tolerates_odd_shapes():
    client = LlmClient(model="m")
    assert client.response_content(_response("hello")) == "hello"
    assert client.response_content(SimpleNamespace(choices=[])) == ""
    parts = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=[{"text": "a"}, {"text": "b"}]))])
    assert client.response_content(parts) == "ab"


def test_generation_prompt_omits_empty_exclusions():
    text = prompt_builders.reminder_generation_user_prompt(answers=[("pets", "pet_type", "cat")], today=date(2024, 1, 2))
    assert "already has" not in text
    assert text.startswith("Today's date: 2024-01-02")
