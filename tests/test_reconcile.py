from __future__ import annotations

import json
from datetime import date

import pytest

from nudge.models import SOURCE_AI, SOURCE_MANUAL, SOURCE_RECURRENCE, Reminder
from nudge.reminders.answers import AnswerInput, save_answers
from nudge.reminders.dedup import TokenOverlapDuplicateMatcher
from nudge.reminders.errors import GenerationError, MalformedUpstreamDataError, NoAnswersError
from nudge.reminders.reconcile import ReminderReconciler, quick_add_reminder

from conftest import NOW_TS, OTHER_USER, USER, FakeGenerator


def _candidate(title: str, **overrides) -> dict:
    item = {
        "category": "home",
        "title": title,
        "description": "One sentence.",
        "due_date": "2024-06-24",
        "recurring": False,
        "recurrence_label": None,
    }
    item.update(overrides)
    return item


def _reminder(title: str, *, source: str, completed: bool = False, user_id: str = USER) -> Reminder:
    return Reminder(
        user_id=user_id,
        category="home",
        title=title,
        due_date="2024-06-01",
        recurring=False,
        completed=completed,
        source=source,
        created_at=NOW_TS,
    )


@pytest.fixture
def answered(repo):
    save_answers(
        repo,
        USER,
        [
            AnswerInput("car", "last_oil_change", "don't remember"),
            AnswerInput("home", "has_smoke_detectors", "yes"),
        ],
        now_ts=NOW_TS,
    )
    return repo


def _titles(repo, user_id=USER) -> set[str]:
    return {r.title for r in repo.list_reminders(user_id)}


def test_no_answers_is_rejected_before_calling_generator(repo, clock):
    gen = FakeGenerator(json.dumps([_candidate("Anything")]))

    with pytest.raises(NoAnswersError):
        ReminderReconciler(repo, gen, clock=clock).regenerate(USER)
    assert gen.calls == []


def test_regeneration_replaces_only_open_ai_reminders(answered, clock):
    repo = answered
    repo.add_reminders(
        [
            _reminder("Old AI task", source=SOURCE_AI),
            _reminder("Finished AI task", source=SOURCE_AI, completed=True),
            _reminder("Buy birthday gift", source=SOURCE_MANUAL),
            _reminder("Replace furnace filter", source=SOURCE_RECURRENCE),
            _reminder("Other user's AI task", source=SOURCE_AI, user_id=OTHER_USER),
        ]
    )
    gen = FakeGenerator(json.dumps([_candidate("Test smoke detectors"), _candidate("Get oil change")]))

    result = ReminderReconciler(repo, gen, clock=clock).regenerate(USER)

    assert (result.created, result.skipped_duplicates, result.deleted) == (2, 0, 1)
    assert _titles(repo) == {
        "Finished AI task",
        "Buy birthday gift",
        "Replace furnace filter",
        "Test smoke detectors",
        "Get oil change",
    }
    assert _titles(repo, OTHER_USER) == {"Other user's AI task"}
    assert repo.get_user(USER).last_generated_at == NOW_TS


def test_generator_sees_answers_and_surviving_titles(answered, clock):
    repo = answered
    repo.add_reminders(
        [
            _reminder("Old AI task", source=SOURCE_AI),
            _reminder("Done manual task", source=SOURCE_MANUAL, completed=True),
            _reminder("Buy birthday gift", source=SOURCE_MANUAL),
        ]
    )
    gen = FakeGenerator("[]")

    ReminderReconciler(repo, gen, clock=clock).regenerate(USER)

    [call] = gen.calls
    assert call["answers"] == [
        ("car", "last_oil_change", "don't remember"),
        ("home", "has_smoke_detectors", "yes"),
    ]
    assert call["exclude_titles"] == ["Buy birthday gift"]
    assert call["today"] == clock.today()


def test_duplicates_of_surviving_titles_are_skipped(answered, clock):
    repo = answered
    repo.add_reminder(_reminder("Oil change", source=SOURCE_MANUAL))
    gen = FakeGenerator(json.dumps([_candidate("Get oil change"), _candidate("Test smoke detectors")]))

    result = ReminderReconciler(repo, gen, clock=clock).regenerate(USER)

    assert (result.created, result.skipped_duplicates) == (1, 1)
    assert _titles(repo) == {"Oil change", "Test smoke detectors"}


def test_candidates_are_not_deduplicated_against_deleted_ai_titles(answered, clock):
    repo = answered
    repo.add_reminder(_reminder("Get oil change", source=SOURCE_AI))
    gen = FakeGenerator(json.dumps([_candidate("Get oil change")]))

    result = ReminderReconciler(repo, gen, clock=clock).regenerate(USER)

    assert (result.created, result.skipped_duplicates, result.deleted) == (1, 0, 1)
    [row] = repo.list_reminders(USER)
    assert row.source == SOURCE_AI


def test_matcher_is_pluggable(answered, clock):
    repo = answered
    repo.add_reminder(_reminder("Schedule annual physical", source=SOURCE_MANUAL))
    gen = FakeGenerator(json.dumps([_candidate("Physical annual: schedule")]))

    default = ReminderReconciler(repo, gen, clock=clock).regenerate(USER)
    assert default.skipped_duplicates == 0

    tokens = ReminderReconciler(repo, gen, TokenOverlapDuplicateMatcher(0.6), clock).regenerate(USER)
    assert tokens.skipped_duplicates == 1


def test_saved_reminders_carry_resolved_interval(answered, clock):
    repo = answered
    gen = FakeGenerator(
        json.dumps([_candidate("Get oil change", category="car", recurring=True, recurrence_label="Every 6 months")])
    )

    ReminderReconciler(repo, gen, clock=clock).regenerate(USER)

    [row] = repo.list_reminders(USER)
    assert row.source == SOURCE_AI
    assert row.recurring is True
    assert row.recurrence_interval == "6_months"


@pytest.mark.parametrize(
    "gen",
    [
        FakeGenerator("not json"),
        FakeGenerator(json.dumps([_candidate("Fine"), _candidate("")])),
        FakeGenerator(error=GenerationError("upstream down")),
    ],
)
def test_failed_generation_leaves_reminders_untouched(answered, clock, gen):
    repo = answered
    repo.add_reminders([_reminder("Old AI task", source=SOURCE_AI), _reminder("Buy birthday gift", source=SOURCE_MANUAL)])

    with pytest.raises((MalformedUpstreamDataError, GenerationError)):
        ReminderReconciler(repo, gen, clock=clock).regenerate(USER)

    assert _titles(repo) == {"Old AI task", "Buy birthday gift"}
    assert repo.get_user(USER).last_generated_at is None


def test_quick_add_saves_manual_reminder(repo, clock):
    gen = FakeGenerator(
        quick=json.dumps(
            {
                "category": "Pets",
                "title": "Buy flea medicine",
                "recurring": True,
                "recurrence_label": "Monthly",
                "recurrence_interval": "1_month",
            }
        )
    )

    row = quick_add_reminder(repo, gen, "flea meds for the dog every month", user_id=USER, clock=clock)

    assert row.id is not None
    assert row.source == SOURCE_MANUAL
    assert row.category == "pets"
    assert row.due_date == "2024-06-17"
    assert row.recurrence_interval == "1_month"
    assert gen.calls == [{"text": "flea meds for the dog every month", "today": date(2024, 6, 10)}]


def test_quick_add_with_bad_output_saves_nothing(repo, clock):
    gen = FakeGenerator(quick="I couldn't parse that")

    with pytest.raises(MalformedUpstreamDataError):
        quick_add_reminder(repo, gen, "something", user_id=USER, clock=clock)
    assert repo.list_reminders(USER) == []
