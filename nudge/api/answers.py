"""
/answers エンドポイント

オンボーディングの回答の保存と一覧を提供する。
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from nudge import schemas
from nudge.api.http_auth import require_user
from nudge.app_bootstrap.dependencies import get_clock_service_dep, get_user_repo
from nudge.clock import ClockService
from nudge.reminders.answers import AnswerInput, save_answers
from nudge.reminders.repo import ReminderRepository


router = APIRouter()


def _answers_response(repo: ReminderRepository, user_id: str) -> schemas.AnswersResponse:
    user = repo.get_user(user_id)
    return schemas.AnswersResponse(
        onboarding_complete=bool(user.onboarding_complete) if user is not None else False,
        answers=[schemas.AnswerResponse.model_validate(a) for a in repo.list_answers(user_id)],
    )


@router.get("/answers", response_model=schemas.AnswersResponse)
def list_answers(
    user_id: str = Depends(require_user),
    repo: ReminderRepository = Depends(get_user_repo),
) -> schemas.AnswersResponse:
    """回答を作成順で返す。"""

    return _answers_response(repo, user_id)


@router.post("/answers", response_model=schemas.AnswersResponse)
def post_answers(
    request: schemas.AnswersRequest,
    user_id: str = Depends(require_user),
    repo: ReminderRepository = Depends(get_user_repo),
    clock: ClockService = Depends(get_clock_service_dep),
) -> schemas.AnswersResponse:
    """回答を (user, key) で upsert し、オンボーディング完了にする。"""

    save_answers(
        repo,
        user_id,
        [AnswerInput(category=a.category, key=a.key, value=a.value) for a in request.answers],
        now_ts=clock.now_utc_ts(),
    )
    return _answers_response(repo, user_id)
