from __future__ import annotations

from datetime import datetime, timezone

import pytest

from nudge.clock import ClockService
from nudge.db import build_session_factory, create_db_engine
from nudge.reminders.repo import ReminderRepository


# 2024-06-10 12:00 UTC（正午なので大半のローカルTZで同じ暦日になる）
NOW_TS = int(datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc).timestamp())
USER = "user-a"
OTHER_USER = "user-b"


class FakeGenerator:
    """決まった応答を返す ReminderGenerator。"""

    def __init__(self, payload: str = "[]", quick: str = "{}", error: Exception | None = None) -> None:
        self.payload = payload
        self.quick = quick
        self.error = error
        self.calls: list[dict] = []

    def generate(self, answers, exclude_titles, today):
        self.calls.append({"answers": list(answers), "exclude_titles": list(exclude_titles), "today": today})
        if self.error is not None:
            raise self.error
        return self.payload

    def quick_add(self, text, today):
        self.calls.append({"text": text, "today": today})
        if self.error is not None:
            raise self.error
        return self.quick


@pytest.fixture
def clock():
    return ClockService(time_func=lambda: NOW_TS)


@pytest.fixture
def session():
    engine = create_db_engine("sqlite://")
    factory = build_session_factory(engine)
    s = factory()
    try:
        yield s
    finally:
        s.close()
        engine.dispose()


@pytest.fixture
def repo(session, clock):
    r = ReminderRepository(session)
    r.ensure_user(USER, now_ts=clock.now_utc_ts())
    r.ensure_user(OTHER_USER, now_ts=clock.now_utc_ts())
    return r
