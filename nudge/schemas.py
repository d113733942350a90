"""
API リクエスト/レスポンスの Pydantic モデル

FastAPI エンドポイントで使用するリクエスト/レスポンスのスキーマ定義。
バリデーション、シリアライゼーション、OpenAPI ドキュメント生成に使用される。
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nudge.reminders.candidates import ReminderCandidate
from nudge.reminders.intervals import format_due_date, parse_due_date


# --- answers ---


class AnswerItem(BaseModel):
    """回答1件（オンボーディングの入力）。"""

    model_config = ConfigDict(str_strip_whitespace=True)

    category: str = Field(min_length=1)
    key: str = Field(min_length=1)
    value: str

    @field_validator("category")
    @classmethod
    def _lower_category(cls, v: str) -> str:
        return v.lower()


class AnswersRequest(BaseModel):
    """/api/answers の保存リクエスト。"""

    answers: List[AnswerItem] = Field(min_length=1)


class AnswerResponse(BaseModel):
    """保存済みの回答。"""

    model_config = ConfigDict(from_attributes=True)

    category: str
    key: str
    value: str
    created_at: int
    updated_at: int


class AnswersResponse(BaseModel):
    """/api/answers の一覧レスポンス。"""

    onboarding_complete: bool
    answers: List[AnswerResponse]


# --- reminders ---


class ReminderCreateRequest(ReminderCandidate):
    """手動リマインダーの作成リクエスト（生成候補と同じ検証規則）。"""


class QuickAddRequest(BaseModel):
    """自由入力1件のクイック追加リクエスト。"""

    model_config = ConfigDict(str_strip_whitespace=True)

    text: str = Field(min_length=1, max_length=1000)


class ReminderUpdateRequest(BaseModel):
    """
    リマインダー更新リクエスト。

    - completed: true で完了。false は完了済みに対しては拒否される（完了は取り消せない）
    - snoozed_until: YYYY-MM-DD でスヌーズ、null で解除。省略時は変更しない
    """

    completed: Optional[bool] = None
    snoozed_until: Optional[str] = None

    @field_validator("snoozed_until", mode="before")
    @classmethod
    def _validate_snooze(cls, v: object) -> Optional[str]:
        if v is None or str(v).strip() == "":
            return None
        return format_due_date(parse_due_date(str(v).strip()))

    def snooze_requested(self) -> bool:
        """snoozed_until が明示されたか（null による解除を含む）。"""
        return "snoozed_until" in self.model_fields_set


class ReminderResponse(BaseModel):
    """保存済みのリマインダー。"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    category: str
    title: str
    description: Optional[str] = None
    due_date: str
    recurring: bool
    recurrence_label: Optional[str] = None
    recurrence_interval: Optional[str] = None
    completed: bool
    completed_at: Optional[int] = None
    snoozed_until: Optional[str] = None
    source: str
    parent_id: Optional[int] = None
    created_at: int


class ReminderUpdateResponse(BaseModel):
    """更新後のリマインダーと、完了で生まれた後継（あれば）。"""

    reminder: ReminderResponse
    successor: Optional[ReminderResponse] = None


class GenerateResponse(BaseModel):
    """再生成の結果。"""

    count: int
    skipped_duplicates: int
    deleted: int


# --- checkins ---


class CheckinResponse(BaseModel):
    """open な再質問。"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    category: str
    key: str
    prompt: str
    due_date: str
    created_at: int


class CheckinAnswerRequest(BaseModel):
    """再質問への回答。"""

    model_config = ConfigDict(str_strip_whitespace=True)

    value: str = Field(min_length=1)
