"""
回答（answers）の保存とアカウント初期化。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from nudge.models import Answer
from nudge.reminders.repo import ReminderRepository


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnswerInput:
    """回答1件（分類/キー/自由入力の値）。"""

    category: str
    key: str
    value: str


def save_answers(
    repo: ReminderRepository,
    user_id: str,
    answers: Iterable[AnswerInput],
    *,
    now_ts: int,
) -> list[Answer]:
    """
    回答を (user, key) で upsert し、オンボーディング完了にする。

    NOTE:
    - 回答の保存と完了フラグは独立した書き込み。フラグは「回答があるか」で呼び出し側が再判定できる。
    """

    rows: list[Answer] = []
    for a in answers:
        rows.append(
            repo.upsert_answer(
                user_id,
                category=a.category,
                key=a.key,
                value=a.value,
                now_ts=now_ts,
            )
        )
    repo.mark_onboarding_complete(user_id)
    logger.info("answers saved", extra={"user_id": str(user_id), "count": len(rows)})
    return rows


def reset_account(repo: ReminderRepository, user_id: str) -> None:
    """リマインダー/再質問/回答を全削除し、オンボーディングを未完了へ戻す。"""

    repo.reset_user(user_id)
    logger.warning("account reset", extra={"user_id": str(user_id)})
