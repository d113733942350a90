"""
リマインダーの状態遷移（open -> completed）と繰り返しの後継生成。

状態:
    - open: 未完了（snoozed_until は表示上の抑止で、状態としては open のまま）
    - completed: 完了（終端。open へは戻さない）

方針:
    - 後継の生成は「open -> completed の遷移」にだけ結びつける。既に completed の行を再度完了しても何も作らない。
    - 後継の判断は、遷移を書き込んだ後に DB から読み直した recurring / recurrence_interval で行う
      （リクエスト本文の値ではなく、保存済みの値が正）。
    - recurrence_interval が無い/未知なら後継は作らない（エラーにしない）。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from nudge.clock import ClockService
from nudge.models import SOURCE_RECURRENCE, Reminder
from nudge.reminders.errors import ReminderNotFoundError, ReminderStateError
from nudge.reminders.intervals import compute_next_due_date, format_due_date, is_known_interval, parse_due_date
from nudge.reminders.repo import ReminderRepository


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionResult:
    """完了操作の結果。"""

    reminder: Reminder
    successor: Optional[Reminder]
    transitioned: bool


def is_active(reminder: Reminder, today: date) -> bool:
    """一覧（アクティブ表示）に出すべきなら True。"""

    if reminder.completed:
        return False
    if reminder.snoozed_until and today < parse_due_date(reminder.snoozed_until):
        return False
    return True


def build_successor(reminder: Reminder, *, today: date, now_ts: int) -> Optional[Reminder]:
    """
    完了したリマインダーの後継を作る（保存はしない）。

    Returns:
        後継の Reminder。繰り返し不可なら None。
    """

    if not reminder.recurring:
        return None
    if not is_known_interval(reminder.recurrence_interval):
        return None

    next_due = compute_next_due_date(reminder.due_date, reminder.recurrence_interval, today=today)
    return Reminder(
        user_id=reminder.user_id,
        category=reminder.category,
        title=reminder.title,
        description=reminder.description,
        due_date=next_due,
        recurring=True,
        recurrence_label=reminder.recurrence_label,
        recurrence_interval=reminder.recurrence_interval,
        completed=False,
        completed_at=None,
        snoozed_until=None,
        source=SOURCE_RECURRENCE,
        parent_id=reminder.id,
        created_at=int(now_ts),
    )


class ReminderLifecycle:
    """完了/スヌーズ/削除を扱う。"""

    def __init__(self, repo: ReminderRepository, clock: ClockService) -> None:
        self.repo = repo
        self.clock = clock

    def get(self, user_id: str, reminder_id: int) -> Reminder:
        """所有者一致のリマインダーを返す（無ければ ReminderNotFoundError）。"""

        row = self.repo.get_reminder(user_id, reminder_id)
        if row is None:
            raise ReminderNotFoundError(f"reminder not found: {reminder_id}")
        return row

    def complete(self, user_id: str, reminder_id: int) -> CompletionResult:
        """
        リマインダーを完了にする。

        - open -> completed の遷移時だけ、後継を1件作る
        - 既に completed なら何もしない（transitioned=False, successor=None）
        """

        row = self.get(user_id, reminder_id)

        # --- 既に完了済みなら no-op（後継を二重に作らない） ---
        if row.completed:
            return CompletionResult(reminder=row, successor=None, transitioned=False)

        # --- 遷移を書き込み、保存済みの値で読み直す ---
        now_ts = self.clock.now_utc_ts()
        row.completed = True
        row.completed_at = int(now_ts)
        self.repo.refresh(row)

        # --- 遷移の副作用として後継を作る ---
        successor = build_successor(row, today=self.clock.today(), now_ts=now_ts)
        if successor is not None:
            self.repo.add_reminder(successor)
            logger.info(
                "recurring reminder completed; successor created",
                extra={
                    "reminder_id": int(row.id),
                    "successor_id": int(successor.id),
                    "due_date": successor.due_date,
                    "interval": successor.recurrence_interval,
                },
            )
        elif row.recurring:
            # NOTE: recurring でも間隔が無い/未知なら後継は作らない（表示上の recurring のみ）。
            logger.info(
                "recurring reminder completed without usable interval",
                extra={"reminder_id": int(row.id), "interval": row.recurrence_interval},
            )
        return CompletionResult(reminder=row, successor=successor, transitioned=True)

    def reopen(self, user_id: str, reminder_id: int) -> None:
        """完了の取り消しは許可しない（完了は終端）。"""

        row = self.get(user_id, reminder_id)
        if row.completed:
            raise ReminderStateError("completed reminders cannot be reopened")

    def snooze(self, user_id: str, reminder_id: int, until: Optional[str]) -> Reminder:
        """スヌーズ期限を設定する（None で解除）。"""

        row = self.get(user_id, reminder_id)
        row.snoozed_until = format_due_date(parse_due_date(until)) if until else None
        self.repo.refresh(row)
        return row

    def delete(self, user_id: str, reminder_id: int) -> None:
        """リマインダーを削除する。"""

        if not self.repo.delete_reminder(user_id, reminder_id):
            raise ReminderNotFoundError(f"reminder not found: {reminder_id}")
