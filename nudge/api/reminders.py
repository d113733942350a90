"""
/reminders エンドポイント

提供する機能:
- 一覧（期日順。active_only で完了/スヌーズ中を除外）
- 手動作成（構造化入力）
- クイック追加（自由入力を LLM で解析）
- 更新（完了/スヌーズ）
- 削除
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from nudge import schemas
from nudge.api.http_auth import require_user
from nudge.api.http_errors import to_http_exception
from nudge.app_bootstrap.dependencies import (
    get_clock_service_dep,
    get_quick_add_default_due_days,
    get_reminder_generator,
    get_user_repo,
)
from nudge.clock import ClockService
from nudge.reminders.errors import NudgeError
from nudge.reminders.generation import ReminderGenerator
from nudge.reminders.lifecycle import ReminderLifecycle, is_active
from nudge.reminders.reconcile import add_manual_reminder, quick_add_reminder
from nudge.reminders.repo import ReminderRepository


router = APIRouter()


@router.get("/reminders", response_model=list[schemas.ReminderResponse])
def list_reminders(
    active_only: bool = Query(default=False),
    user_id: str = Depends(require_user),
    repo: ReminderRepository = Depends(get_user_repo),
    clock: ClockService = Depends(get_clock_service_dep),
) -> list[schemas.ReminderResponse]:
    """リマインダーを期日順で返す。"""

    rows = repo.list_reminders(user_id)
    if active_only:
        today = clock.today()
        rows = [r for r in rows if is_active(r, today)]
    return [schemas.ReminderResponse.model_validate(r) for r in rows]


@router.post("/reminders", response_model=schemas.ReminderResponse, status_code=status.HTTP_201_CREATED)
def create_reminder(
    request: schemas.ReminderCreateRequest,
    user_id: str = Depends(require_user),
    repo: ReminderRepository = Depends(get_user_repo),
    clock: ClockService = Depends(get_clock_service_dep),
) -> schemas.ReminderResponse:
    """手動リマインダーを作成する。"""

    row = add_manual_reminder(repo, request, user_id=user_id, now_ts=clock.now_utc_ts())
    return schemas.ReminderResponse.model_validate(row)


@router.post("/reminders/quick-add", response_model=schemas.ReminderResponse, status_code=status.HTTP_201_CREATED)
def quick_add(
    request: schemas.QuickAddRequest,
    user_id: str = Depends(require_user),
    repo: ReminderRepository = Depends(get_user_repo),
    generator: ReminderGenerator = Depends(get_reminder_generator),
    clock: ClockService = Depends(get_clock_service_dep),
    default_due_days: int = Depends(get_quick_add_default_due_days),
) -> schemas.ReminderResponse:
    """自由入力1件を解析して手動リマインダーとして保存する。"""

    try:
        row = quick_add_reminder(
            repo,
            generator,
            request.text,
            user_id=user_id,
            clock=clock,
            default_due_days=default_due_days,
        )
    except NudgeError as exc:
        raise to_http_exception(exc) from exc
    return schemas.ReminderResponse.model_validate(row)


@router.put("/reminders/{reminder_id}", response_model=schemas.ReminderUpdateResponse)
def update_reminder(
    reminder_id: int,
    request: schemas.ReminderUpdateRequest,
    user_id: str = Depends(require_user),
    repo: ReminderRepository = Depends(get_user_repo),
    clock: ClockService = Depends(get_clock_service_dep),
) -> schemas.ReminderUpdateResponse:
    """
    リマインダーを更新する。

    - snoozed_until を先に反映し、その後に completed を反映する
    - completed=false は完了済みに対しては 409
    """

    lifecycle = ReminderLifecycle(repo, clock)
    try:
        row = lifecycle.get(user_id, reminder_id)

        # --- スヌーズ（省略時は触らない） ---
        if request.snooze_requested():
            row = lifecycle.snooze(user_id, reminder_id, request.snoozed_until)

        # --- 完了（一方向） ---
        successor = None
        if request.completed is True:
            result = lifecycle.complete(user_id, reminder_id)
            row = result.reminder
            successor = result.successor
        elif request.completed is False:
            lifecycle.reopen(user_id, reminder_id)
    except NudgeError as exc:
        raise to_http_exception(exc) from exc

    return schemas.ReminderUpdateResponse(
        reminder=schemas.ReminderResponse.model_validate(row),
        successor=schemas.ReminderResponse.model_validate(successor) if successor is not None else None,
    )


@router.delete("/reminders/{reminder_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reminder(
    reminder_id: int,
    user_id: str = Depends(require_user),
    repo: ReminderRepository = Depends(get_user_repo),
    clock: ClockService = Depends(get_clock_service_dep),
) -> Response:
    """リマインダーを削除する。"""

    try:
        ReminderLifecycle(repo, clock).delete(user_id, reminder_id)
    except NudgeError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
