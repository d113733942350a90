"""
/checkins エンドポイント

鮮度切れの回答に対する再質問（check-in）の一覧/回答/却下を提供する。
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from nudge import schemas
from nudge.api.http_auth import require_user
from nudge.api.http_errors import to_http_exception
from nudge.app_bootstrap.dependencies import get_clock_service_dep, get_user_repo
from nudge.clock import ClockService
from nudge.reminders.checkins import CheckinScheduler
from nudge.reminders.errors import NudgeError
from nudge.reminders.repo import ReminderRepository


router = APIRouter()


@router.get("/checkins", response_model=list[schemas.CheckinResponse])
def list_checkins(
    user_id: str = Depends(require_user),
    repo: ReminderRepository = Depends(get_user_repo),
    clock: ClockService = Depends(get_clock_service_dep),
) -> list[schemas.CheckinResponse]:
    """鮮度を評価して check-in を作り、open なものを返す。"""

    rows = CheckinScheduler(repo, clock).refresh(user_id)
    return [schemas.CheckinResponse.model_validate(r) for r in rows]


@router.put("/checkins/{checkin_id}", response_model=schemas.CheckinResponse)
def answer_checkin(
    checkin_id: int,
    request: schemas.CheckinAnswerRequest,
    user_id: str = Depends(require_user),
    repo: ReminderRepository = Depends(get_user_repo),
    clock: ClockService = Depends(get_clock_service_dep),
) -> schemas.CheckinResponse:
    """check-in に回答し、元の回答を更新する。"""

    try:
        row = CheckinScheduler(repo, clock).answer(user_id, checkin_id, request.value)
    except NudgeError as exc:
        raise to_http_exception(exc) from exc
    return schemas.CheckinResponse.model_validate(row)


@router.delete("/checkins/{checkin_id}", status_code=status.HTTP_204_NO_CONTENT)
def dismiss_checkin(
    checkin_id: int,
    user_id: str = Depends(require_user),
    repo: ReminderRepository = Depends(get_user_repo),
    clock: ClockService = Depends(get_clock_service_dep),
) -> Response:
    """check-in を却下する。"""

    try:
        CheckinScheduler(repo, clock).dismiss(user_id, checkin_id)
    except NudgeError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
