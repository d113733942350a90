from __future__ import annotations

import pytest

from nudge.reminders.checkins import CheckinScheduler
from nudge.reminders.errors import CheckinClosedError, CheckinNotFoundError
from nudge.reminders.staleness import StalenessRule

from conftest import NOW_TS, OTHER_USER, USER


DAY = 24 * 60 * 60
# どのルール（最長12か月）から見ても古い回答時刻
STALE_TS = NOW_TS - 400 * DAY


def _answer(repo, key, value="yes", *, category="car", ts=STALE_TS, user_id=USER):
    return repo.upsert_answer(user_id, category=category, key=key, value=value, now_ts=ts)


def test_stale_answer_gets_one_checkin(repo, clock):
    _answer(repo, "last_oil_change", "March")
    scheduler = CheckinScheduler(repo, clock)

    first = scheduler.refresh(USER)
    second = scheduler.refresh(USER)

    assert [c.key for c in first] == ["last_oil_change"]
    assert first[0].prompt == "Have you gotten an oil change recently?"
    assert first[0].category == "car"
    assert [c.id for c in second] == [first[0].id]


def test_fresh_missing_and_unknown_answers_get_no_checkin(repo, clock):
    _answer(repo, "last_dentist", category="health", ts=NOW_TS - 30 * DAY)
    _answer(repo, "favorite_color", category="personal")

    assert CheckinScheduler(repo, clock).refresh(USER) == []


def test_threshold_is_per_rule(repo, clock):
    # 4か月前: deep clean（3か月）は stale、checkup（12か月）は fresh
    ts = NOW_TS - 122 * DAY
    _answer(repo, "last_deep_clean", category="home", ts=ts)
    _answer(repo, "last_checkup", category="health", ts=ts)

    assert [c.key for c in CheckinScheduler(repo, clock).refresh(USER)] == ["last_deep_clean"]


def test_answering_refreshes_the_answer_and_closes_the_checkin(repo, clock):
    _answer(repo, "car_mileage", "40000")
    scheduler = CheckinScheduler(repo, clock)
    [checkin] = scheduler.refresh(USER)

    scheduler.answer(USER, checkin.id, "52000")

    answer = repo.get_answer(USER, "car_mileage")
    assert answer.value == "52000"
    assert answer.updated_at == NOW_TS
    assert checkin.answered is True
    assert scheduler.refresh(USER) == []


def test_answered_key_comes_back_after_it_goes_stale_again(repo, clock):
    _answer(repo, "last_deep_clean", category="home")
    scheduler = CheckinScheduler(repo, clock)
    [checkin] = scheduler.refresh(USER)
    scheduler.answer(USER, checkin.id, "yesterday")

    clock.advance_domain_seconds(seconds=95 * DAY)
    [again] = scheduler.refresh(USER)

    assert again.key == "last_deep_clean"
    assert again.id != checkin.id


def test_dismiss_does_not_touch_the_answer(repo, clock):
    _answer(repo, "last_credit_check", "never", category="finance")
    scheduler = CheckinScheduler(repo, clock)
    [checkin] = scheduler.refresh(USER)

    scheduler.dismiss(USER, checkin.id)

    assert checkin.dismissed is True
    assert repo.get_answer(USER, "last_credit_check").updated_at == STALE_TS
    assert repo.list_open_checkins(USER) == []


def test_closed_checkins_reject_further_actions(repo, clock):
    _answer(repo, "last_vet_visit", category="pets")
    _answer(repo, "last_checkup", category="health")
    scheduler = CheckinScheduler(repo, clock)
    answered, dismissed = scheduler.refresh(USER)
    scheduler.answer(USER, answered.id, "last month")
    scheduler.dismiss(USER, dismissed.id)

    for checkin_id in (answered.id, dismissed.id):
        with pytest.raises(CheckinClosedError):
            scheduler.answer(USER, checkin_id, "again")
        with pytest.raises(CheckinClosedError):
            scheduler.dismiss(USER, checkin_id)


def test_other_users_checkin_is_not_found(repo, clock):
    _answer(repo, "last_oil_change", user_id=OTHER_USER)
    scheduler = CheckinScheduler(repo, clock)
    [theirs] = scheduler.refresh(OTHER_USER)

    with pytest.raises(CheckinNotFoundError):
        scheduler.answer(USER, theirs.id, "mine now")
    assert scheduler.refresh(USER) == []


def test_custom_rule_table(repo, clock):
    _answer(repo, "tire_rotation", category="car", ts=NOW_TS - 40 * DAY)
    rules = (StalenessRule("car", "tire_rotation", 1, "Rotated your tires?"),)

    [checkin] = CheckinScheduler(repo, clock, rules).refresh(USER)

    assert checkin.prompt == "Rotated your tires?"
