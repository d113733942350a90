"""
/generate エンドポイント

回答から AI 生成リマインダーを作り直す。
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from nudge import schemas
from nudge.api.http_auth import require_user
from nudge.api.http_errors import to_http_exception
from nudge.app_bootstrap.dependencies import (
    get_clock_service_dep,
    get_duplicate_matcher,
    get_reminder_generator,
    get_user_repo,
)
from nudge.clock import ClockService
from nudge.reminders.dedup import DuplicateMatcher
from nudge.reminders.errors import NudgeError
from nudge.reminders.generation import ReminderGenerator
from nudge.reminders.reconcile import ReminderReconciler
from nudge.reminders.repo import ReminderRepository


router = APIRouter()


@router.post("/generate", response_model=schemas.GenerateResponse)
def generate(
    user_id: str = Depends(require_user),
    repo: ReminderRepository = Depends(get_user_repo),
    generator: ReminderGenerator = Depends(get_reminder_generator),
    matcher: DuplicateMatcher = Depends(get_duplicate_matcher),
    clock: ClockService = Depends(get_clock_service_dep),
) -> schemas.GenerateResponse:
    """
    再生成を実行する。

    - 回答が無ければ 400
    - 生成/解析に失敗したら 502（既存のリマインダーは変更しない）
    """

    reconciler = ReminderReconciler(repo, generator, matcher, clock)
    try:
        result = reconciler.regenerate(user_id)
    except NudgeError as exc:
        raise to_http_exception(exc) from exc
    return schemas.GenerateResponse(
        count=result.created,
        skipped_duplicates=result.skipped_duplicates,
        deleted=result.deleted,
    )
