from __future__ import annotations

import json
from datetime import date

import pytest

from nudge.reminders.candidates import parse_candidate_list, parse_quick_add
from nudge.reminders.errors import MalformedUpstreamDataError


def _item(**overrides) -> dict:
    item = {
        "category": "car",
        "title": "Get oil change",
        "description": "It has been a while.",
        "due_date": "2024-06-20",
        "recurring": True,
        "recurrence_label": "Every 6 months",
    }
    item.update(overrides)
    return item


def test_parses_fenced_array_and_resolves_interval_from_label():
    text = "```json\n" + json.dumps([_item()]) + "\n```"
    [c] = parse_candidate_list(text)
    assert c.category == "car"
    assert c.title == "Get oil change"
    assert c.recurring is True
    assert c.resolved_interval() == "6_months"


def test_explicit_interval_wins_over_label():
    [c] = parse_candidate_list(json.dumps([_item(recurrence_interval="1_year")]))
    assert c.resolved_interval() == "1_year"


def test_category_is_case_insensitive():
    [c] = parse_candidate_list(json.dumps([_item(category="Health")]))
    assert c.category == "health"


@pytest.mark.parametrize("raw, expected", [("true", True), ("yes", True), ("1", True), ("false", False), (None, False)])
def test_recurring_coercion(raw, expected):
    [c] = parse_candidate_list(json.dumps([_item(recurring=raw)]))
    assert c.recurring is expected


def test_empty_array_is_valid():
    assert parse_candidate_list("[]") == []


@pytest.mark.parametrize(
    "text",
    [
        "Sorry, I can't help with that.",
        json.dumps({"reminders": []}),
        json.dumps(["oil change"]),
        json.dumps([_item(title="")]),
        json.dumps([_item(category="garden")]),
        json.dumps([_item(due_date="next week")]),
        json.dumps([_item(due_date="2024-06-20T09:00:00Z")]),
        json.dumps([_item(), {"category": "home"}]),
    ],
)
def test_any_bad_element_rejects_the_whole_response(text):
    with pytest.raises(MalformedUpstreamDataError):
        parse_candidate_list(text)


def test_quick_add_fills_defaults():
    c = parse_quick_add(json.dumps({"title": "Call mom"}), today=date(2024, 6, 10))
    assert c.category == "personal"
    assert c.due_date == "2024-06-17"
    assert c.recurring is False
    assert c.resolved_interval() is None


def test_quick_add_respects_configured_default_days():
    c = parse_quick_add(json.dumps({"title": "Call mom", "due_date": ""}), today=date(2024, 6, 10), default_due_days=3)
    assert c.due_date == "2024-06-13"


def test_quick_add_requires_object():
    with pytest.raises(MalformedUpstreamDataError):
        parse_quick_add(json.dumps([{"title": "Call mom"}]), today=date(2024, 6, 10))


@pytest.mark.parametrize(
    "text",
    [
        "Sure! Here are your reminders: " + json.dumps([_item()]) + " Let me know if you need more.",
        '[{"category": "car", "title": "Get oil change", "due_date": "2024-06-20",},]',
        json.dumps([_item()]) + "\nActually, correction: " + json.dumps([_item(), _item(title="Rotate tires")]),
        "```json\n" + json.dumps([_item()]) + "\n```\nHope this helps!",
    ],
)
def test_only_a_wrapping_fence_is_tolerated(text):
    with pytest.raises(MalformedUpstreamDataError):
        parse_candidate_list(text)


def test_bare_fence_without_language_tag_is_stripped():
    [c] = parse_candidate_list("```\n" + json.dumps([_item()]) + "\n```")
    assert c.title == "Get oil change"


def test_quick_add_rejects_prose_around_the_object():
    with pytest.raises(MalformedUpstreamDataError):
        parse_quick_add('Here you go: {"title": "Call mom"}', today=date(2024, 6, 10))


def test_quick_add_unknown_category_falls_back_to_personal():
    c = parse_quick_add(json.dumps({"title": "Water the plants", "category": "garden"}), today=date(2024, 6, 10))
    assert c.category == "personal"


def test_quick_add_keeps_known_category_case_insensitively():
    c = parse_quick_add(json.dumps({"title": "Vet visit", "category": "Pets"}), today=date(2024, 6, 10))
    assert c.category == "pets"
