from __future__ import annotations

from datetime import datetime, timezone

from nudge.reminders.staleness import STALENESS_RULES, find_rule, is_stale


def _ts(*args) -> int:
    return int(datetime(*args, tzinfo=timezone.utc).timestamp())


def test_rule_table_matches_known_keys():
    keys = {r.key: r.months for r in STALENESS_RULES}
    assert keys == {
        "car_mileage": 6,
        "last_oil_change": 6,
        "last_checkup": 12,
        "last_dentist": 6,
        "last_credit_check": 6,
        "last_vet_visit": 12,
        "last_deep_clean": 3,
    }


def test_find_rule_requires_category_and_key():
    assert find_rule("car", "last_oil_change").months == 6
    assert find_rule("home", "last_oil_change") is None
    assert find_rule("car", "favorite_color") is None


def test_recent_answer_is_fresh():
    now = datetime(2024, 6, 10, 12, tzinfo=timezone.utc)
    assert not is_stale(_ts(2024, 1, 10, 12), 6, now=now)


def test_exactly_at_threshold_is_not_stale():
    now = datetime(2024, 7, 10, 12, tzinfo=timezone.utc)
    assert not is_stale(_ts(2024, 1, 10, 12), 6, now=now)


def test_one_second_past_threshold_is_stale():
    now = datetime(2024, 7, 10, 12, 0, 1, tzinfo=timezone.utc)
    assert is_stale(_ts(2024, 1, 10, 12), 6, now=now)


def test_naive_now_is_treated_as_utc():
    assert is_stale(_ts(2023, 1, 1), 12, now=datetime(2024, 6, 10))
