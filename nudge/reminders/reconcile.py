"""
リマインダーの再生成（reconcile）。

目的:
    - 回答から AI 生成リマインダーの集合を作り直す。
    - 手動/繰り返し由来のリマインダーと、完了済みの履歴には触れない。

処理順:
    1) 回答を読む（無ければ NoAnswersError）
    2) 残る題名（未完了かつ source != ai）を集める
    3) generator を呼び、応答を全件検証する
    4) ここまで成功したら、未完了の AI 生成分を削除し、重複を除いた候補を source=ai で保存する

NOTE:
    - 3) までに失敗した場合は何も削除しない（既存の集合はそのまま残る）。
    - 4) は呼び出し側のセッション（1トランザクション）の中で行う。途中失敗はまとめてロールバックされる。
    - 同一ユーザーの再生成が並行した場合は後勝ち（ロックは持たない）。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from nudge.clock import ClockService
from nudge.models import SOURCE_AI, SOURCE_MANUAL, Reminder
from nudge.reminders.candidates import ReminderCandidate, parse_candidate_list, parse_quick_add
from nudge.reminders.dedup import DuplicateMatcher, SubstringDuplicateMatcher
from nudge.reminders.errors import NoAnswersError
from nudge.reminders.generation import ReminderGenerator
from nudge.reminders.repo import ReminderRepository


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegenerationResult:
    """再生成の結果（件数のみ）。"""

    created: int
    skipped_duplicates: int
    deleted: int


def candidate_to_reminder(candidate: ReminderCandidate, *, user_id: str, source: str, now_ts: int) -> Reminder:
    """検証済みの候補を未保存の Reminder 行へ変換する。"""

    interval = candidate.resolved_interval()
    return Reminder(
        user_id=str(user_id),
        category=candidate.category,
        title=candidate.title,
        description=candidate.description,
        due_date=candidate.due_date,
        recurring=bool(candidate.recurring),
        recurrence_label=candidate.recurrence_label,
        recurrence_interval=interval,
        completed=False,
        completed_at=None,
        snoozed_until=None,
        source=str(source),
        parent_id=None,
        created_at=int(now_ts),
    )


class ReminderReconciler:
    """回答 -> AI 生成リマインダーの再生成を行う。"""

    def __init__(
        self,
        repo: ReminderRepository,
        generator: ReminderGenerator,
        matcher: DuplicateMatcher | None = None,
        clock: ClockService | None = None,
    ) -> None:
        self.repo = repo
        self.generator = generator
        self.matcher = matcher or SubstringDuplicateMatcher()
        self.clock = clock or ClockService()

    def surviving_titles(self, user_id: str) -> list[str]:
        """再生成で消えない題名（未完了かつ source != ai）。"""

        return [
            r.title
            for r in self.repo.list_reminders(user_id)
            if not r.completed and r.source != SOURCE_AI
        ]

    def regenerate(self, user_id: str) -> RegenerationResult:
        """
        AI 生成リマインダーを作り直す。

        Raises:
            NoAnswersError: 回答が無い。
            GenerationError: generator 呼び出しが失敗した。
            MalformedUpstreamDataError: 応答が読めない。
        """

        # --- 1) 回答 ---
        answers = self.repo.list_answers(user_id)
        if not answers:
            raise NoAnswersError("no answers yet")

        # --- 2) 残る題名 ---
        survivors = self.surviving_titles(user_id)

        # --- 3) 生成と検証（ここまでは何も書かない） ---
        today = self.clock.today()
        text = self.generator.generate(
            [(a.category, a.key, a.value) for a in answers],
            survivors,
            today,
        )
        candidates = parse_candidate_list(text)

        # --- 4) 置き換え ---
        now_ts = self.clock.now_utc_ts()
        deleted = self.repo.delete_regenerable_reminders(user_id)

        rows: list[Reminder] = []
        skipped = 0
        for c in candidates:
            # NOTE: 比較対象は残る題名だけ。同じ応答内の候補同士は比較しない。
            if self.matcher.is_duplicate(c.title, survivors):
                skipped += 1
                continue
            rows.append(candidate_to_reminder(c, user_id=user_id, source=SOURCE_AI, now_ts=now_ts))

        self.repo.add_reminders(rows)
        self.repo.mark_generated(user_id, now_ts=now_ts)
        logger.info(
            "reminders regenerated",
            extra={
                "user_id": str(user_id),
                "created_count": len(rows),
                "skipped_duplicates": skipped,
                "deleted": deleted,
            },
        )
        return RegenerationResult(created=len(rows), skipped_duplicates=skipped, deleted=deleted)


def add_manual_reminder(
    repo: ReminderRepository,
    candidate: ReminderCandidate,
    *,
    user_id: str,
    now_ts: int,
) -> Reminder:
    """構造化入力から手動リマインダーを1件保存する。"""

    row = repo.add_reminder(candidate_to_reminder(candidate, user_id=user_id, source=SOURCE_MANUAL, now_ts=now_ts))
    logger.info("manual reminder added", extra={"user_id": str(user_id), "reminder_id": int(row.id)})
    return row


def quick_add_reminder(
    repo: ReminderRepository,
    generator: ReminderGenerator,
    text: str,
    *,
    user_id: str,
    clock: ClockService,
    default_due_days: int = 7,
) -> Reminder:
    """
    自由入力1件を generator で解析し、手動リマインダーとして保存する。

    - 応答の検証に失敗したら何も保存しない
    - 重複判定はしない（利用者が明示的に追加したもの）
    """

    today = clock.today()
    raw = generator.quick_add(text, today)
    candidate = parse_quick_add(raw, today=today, default_due_days=default_due_days)
    return add_manual_reminder(repo, candidate, user_id=user_id, now_ts=clock.now_utc_ts())
