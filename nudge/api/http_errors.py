"""
中核の例外 -> HTTPException の対応表。
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from nudge.reminders.errors import (
    CheckinClosedError,
    CheckinNotFoundError,
    GenerationError,
    MalformedUpstreamDataError,
    NoAnswersError,
    NudgeError,
    ReminderNotFoundError,
    ReminderStateError,
)


logger = logging.getLogger(__name__)


def to_http_exception(exc: NudgeError) -> HTTPException:
    """中核の例外を HTTP ステータスへ写す。"""

    if isinstance(exc, (ReminderNotFoundError, CheckinNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (ReminderStateError, CheckinClosedError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, NoAnswersError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No answers yet")
    if isinstance(exc, (MalformedUpstreamDataError, GenerationError)):
        # NOTE: 上流（LLM）の失敗。内部の詳細は返さずログに残す。
        logger.warning("upstream generation failed: %s", exc)
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to generate reminders, please try again",
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="internal error")
