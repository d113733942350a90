"""
/reset エンドポイント

アカウントを初期状態（オンボーディング前）へ戻す。
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from nudge.api.http_auth import require_user
from nudge.app_bootstrap.dependencies import get_user_repo
from nudge.reminders.answers import reset_account
from nudge.reminders.repo import ReminderRepository


router = APIRouter()


@router.post("/reset", status_code=status.HTTP_204_NO_CONTENT)
def reset(
    user_id: str = Depends(require_user),
    repo: ReminderRepository = Depends(get_user_repo),
) -> Response:
    """リマインダー/再質問/回答を全削除する。"""

    reset_account(repo, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
