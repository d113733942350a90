"""
再質問（check-in）のスケジューラ。

目的:
    - 鮮度ルール表に載っているキーの回答が古くなったら、聞き直しの check-in を作る。
    - check-in への回答を answers へ書き戻し、鮮度を回復させる。

方針:
    - 一覧取得のたびに評価する（pull 型。バックグラウンドジョブは持たない）。
    - (user, key) ごとに open な check-in は高々1件。
    - answered / dismissed は終端。同じキーの新しい check-in は、次に鮮度切れになったときだけ作られる。
"""

from __future__ import annotations

import logging

from nudge.clock import ClockService
from nudge.models import CheckIn
from nudge.reminders.errors import CheckinClosedError, CheckinNotFoundError
from nudge.reminders.intervals import format_due_date
from nudge.reminders.repo import ReminderRepository
from nudge.reminders.staleness import STALENESS_RULES, StalenessRule, is_stale


logger = logging.getLogger(__name__)


class CheckinScheduler:
    """check-in の作成/回答/却下を扱う。"""

    def __init__(
        self,
        repo: ReminderRepository,
        clock: ClockService,
        rules: tuple[StalenessRule, ...] = STALENESS_RULES,
    ) -> None:
        self.repo = repo
        self.clock = clock
        self.rules = tuple(rules)

    def refresh(self, user_id: str) -> list[CheckIn]:
        """
        鮮度切れの回答に check-in を作り、open な check-in を古い順で返す。
        """

        # --- 既存の open check-in のキー（二重作成しない） ---
        open_keys = {c.key for c in self.repo.list_open_checkins(user_id)}
        now = self.clock.now_utc()
        now_ts = self.clock.now_utc_ts()
        today = format_due_date(self.clock.today())

        created = 0
        for rule in self.rules:
            if rule.key in open_keys:
                continue

            # --- 回答が無いキーはスキップ（エラーにしない） ---
            answer = self.repo.get_answer(user_id, rule.key)
            if answer is None:
                continue
            if not is_stale(answer.updated_at or answer.created_at, rule.months, now=now):
                continue

            self.repo.add_checkin(
                CheckIn(
                    user_id=str(user_id),
                    category=rule.category,
                    key=rule.key,
                    prompt=rule.prompt,
                    due_date=today,
                    dismissed=False,
                    answered=False,
                    created_at=int(now_ts),
                )
            )
            open_keys.add(rule.key)
            created += 1

        if created:
            logger.info("check-ins created", extra={"user_id": str(user_id), "count": created})
        return self.repo.list_open_checkins(user_id)

    def _get_open(self, user_id: str, checkin_id: int) -> CheckIn:
        row = self.repo.get_checkin(user_id, checkin_id)
        if row is None:
            raise CheckinNotFoundError(f"check-in not found: {checkin_id}")
        if row.answered or row.dismissed:
            raise CheckinClosedError(f"check-in already closed: {checkin_id}")
        return row

    def answer(self, user_id: str, checkin_id: int, value: str) -> CheckIn:
        """
        check-in に回答する。

        - check-in 自身の (category, key) で answers を upsert し、updated_at を今に更新する
        - check-in を answered にする
        """

        row = self._get_open(user_id, checkin_id)
        self.repo.upsert_answer(
            user_id,
            category=row.category,
            key=row.key,
            value=str(value),
            now_ts=self.clock.now_utc_ts(),
        )
        row.answered = True
        self.repo.refresh(row)
        logger.info("check-in answered", extra={"user_id": str(user_id), "checkin_id": int(row.id), "key": row.key})
        return row

    def dismiss(self, user_id: str, checkin_id: int) -> CheckIn:
        """check-in を却下する（answers には触れない）。"""

        row = self._get_open(user_id, checkin_id)
        row.dismissed = True
        self.repo.refresh(row)
        logger.info("check-in dismissed", extra={"user_id": str(user_id), "checkin_id": int(row.id), "key": row.key})
        return row
