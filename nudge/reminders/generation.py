"""
リマインダー生成の協力者（generator）。

目的:
    - 中核ロジック（reconcile / クイック追加）から LLM の詳細を隠し、生の応答テキストだけを返す。
    - テストや別プロバイダでは ReminderGenerator を満たす任意のオブジェクトを注入する。

方針:
    - ここでは応答を解釈しない（検証は `candidates.py`）。
    - 送受信の失敗は GenerationError に包んで投げる（HTTP 境界で 502 にする）。
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Protocol, Sequence

from nudge import prompt_builders
from nudge.llm_client import LlmClient, LlmRequestPurpose
from nudge.reminders.errors import GenerationError


logger = logging.getLogger(__name__)


# クイック追加は1件だけなので応答は短い。
_QUICK_ADD_MAX_TOKENS = 500


class ReminderGenerator(Protocol):
    """リマインダー候補を生成する協力者。"""

    def generate(
        self,
        answers: Sequence[tuple[str, str, str]],
        exclude_titles: Sequence[str],
        today: date,
    ) -> str:
        """回答から候補の JSON 配列テキストを返す。"""
        ...

    def quick_add(self, text: str, today: date) -> str:
        """自由入力1件から候補の JSON オブジェクトテキストを返す。"""
        ...


class LlmReminderGenerator:
    """LlmClient を使う ReminderGenerator 実装。"""

    def __init__(self, llm_client: LlmClient, *, quick_add_default_due_days: int = 7) -> None:
        self.llm_client = llm_client
        self.quick_add_default_due_days = int(quick_add_default_due_days)

    def generate(
        self,
        answers: Sequence[tuple[str, str, str]],
        exclude_titles: Sequence[str],
        today: date,
    ) -> str:
        system_prompt = prompt_builders.reminder_generation_system_prompt()
        input_text = prompt_builders.reminder_generation_user_prompt(
            answers=answers,
            today=today,
            exclude_titles=exclude_titles,
        )
        try:
            # NOTE: 応答は配列なので json_object は要求しない。
            resp = self.llm_client.generate_json_response(
                system_prompt=system_prompt,
                input_text=input_text,
                purpose=LlmRequestPurpose.SYNC_REMINDER_GENERATION,
                json_object=False,
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("reminder generation failed", extra={"answers": len(answers)}, exc_info=exc)
            raise GenerationError("reminder generation failed") from exc
        return self.llm_client.response_content(resp)

    def quick_add(self, text: str, today: date) -> str:
        system_prompt = prompt_builders.quick_add_system_prompt(default_due_days=self.quick_add_default_due_days)
        input_text = prompt_builders.quick_add_user_prompt(text=text, today=today)
        try:
            resp = self.llm_client.generate_json_response(
                system_prompt=system_prompt,
                input_text=input_text,
                purpose=LlmRequestPurpose.SYNC_QUICK_ADD,
                max_tokens=_QUICK_ADD_MAX_TOKENS,
                json_object=True,
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("quick-add parse failed", exc_info=exc)
            raise GenerationError("quick-add parse failed") from exc
        return self.llm_client.response_content(resp)
