"""
LLM 出力 -> リマインダー候補の変換。

目的:
    - LLM が返した JSON（配列 or 単一オブジェクト）を、検証済みの ReminderCandidate へ変換する。
    - 読めないもの（JSON不正、配列でない、必須項目欠落、日付不正）は1件でも混ざれば全体を失敗にする。
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from nudge import common_utils
from nudge.models import CATEGORIES
from nudge.reminders.errors import MalformedUpstreamDataError
from nudge.reminders.intervals import format_due_date, parse_due_date, resolve_interval


class ReminderCandidate(BaseModel):
    """生成された（または手入力された）リマインダー1件分の候補。"""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    category: str
    title: str
    description: Optional[str] = None
    due_date: str
    recurring: bool = False
    recurrence_label: Optional[str] = None
    recurrence_interval: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, v: Any) -> str:
        """分類を小文字へ揃え、語彙外を弾く。"""
        s = str(v or "").strip().lower()
        if s not in CATEGORIES:
            raise ValueError(f"category must be one of {CATEGORIES}")
        return s

    @field_validator("title")
    @classmethod
    def _require_title(cls, v: str) -> str:
        """空の題名は受け付けない。"""
        if not v:
            raise ValueError("title is required")
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def _validate_due_date(cls, v: Any) -> str:
        """期日は YYYY-MM-DD のみ（時刻付きは受け付けない）。"""
        return format_due_date(parse_due_date(str(v or "")))

    @field_validator("recurring", mode="before")
    @classmethod
    def _coerce_recurring(cls, v: Any) -> bool:
        """null は False、文字列は "true"/"yes"/"1" だけを True として扱う。"""
        if v is None:
            return False
        if isinstance(v, str):
            return v.strip().lower() in ("true", "yes", "1")
        return bool(v)

    @field_validator("description", "recurrence_label", "recurrence_interval", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Optional[str]:
        """空文字は None へ寄せる。"""
        s = str(v).strip() if v is not None else ""
        return s or None

    def resolved_interval(self) -> Optional[str]:
        """保存する recurrence_interval（明示キー優先、無ければラベルから推定）。"""
        return resolve_interval(self.recurrence_interval, self.recurrence_label)


def _load_json(text: str) -> Any:
    """LLM 出力を JSON として読む（フェンス許容）。"""

    try:
        return common_utils.parse_json_or_raise(text)
    except ValueError as exc:
        raise MalformedUpstreamDataError("LLM response is not valid JSON") from exc


def parse_candidate_list(text: str) -> list[ReminderCandidate]:
    """
    再生成用の候補配列を検証して返す。

    Raises:
        MalformedUpstreamDataError: JSON が読めない/配列でない/要素が不正。
    """

    data = _load_json(text)
    if not isinstance(data, list):
        raise MalformedUpstreamDataError("LLM response must be a JSON array")

    out: list[ReminderCandidate] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise MalformedUpstreamDataError(f"reminder #{i} is not an object")
        try:
            out.append(ReminderCandidate.model_validate(item))
        except ValidationError as exc:
            raise MalformedUpstreamDataError(f"reminder #{i} is invalid: {exc.errors()}") from exc
    return out


def parse_quick_add(text: str, *, today: date, default_due_days: int = 7) -> ReminderCandidate:
    """
    クイック追加（自由入力1件）の LLM 出力を検証して返す。

    - category が無い/空、または語彙外なら personal
    - due_date が無い/空なら today + default_due_days
    """

    data = _load_json(text)
    if not isinstance(data, dict):
        raise MalformedUpstreamDataError("LLM response must be a JSON object")

    # --- 省略可能な項目に既定値を入れる ---
    payload = dict(data)
    if str(payload.get("category") or "").strip().lower() not in CATEGORIES:
        payload["category"] = "personal"
    if not str(payload.get("due_date") or "").strip():
        payload["due_date"] = format_due_date(today + timedelta(days=int(default_due_days)))

    try:
        return ReminderCandidate.model_validate(payload)
    except ValidationError as exc:
        raise MalformedUpstreamDataError(f"quick-add reminder is invalid: {exc.errors()}") from exc
