"""
プロンプト生成を集約するモジュール。

目的:
    - リマインダー生成/クイック追加のプロンプト組み立てを1箇所で管理する。
    - 応答スキーマ（JSON の項目名）はここと `reminders/candidates.py` で一致させる。

NOTE:
    - LLM に渡すプロンプトは英語（生成されるタイトル/説明も英語になる）。
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from nudge.models import CATEGORIES
from nudge.reminders.intervals import INTERVALS, format_due_date


def _category_list() -> str:
    return ", ".join(CATEGORIES)


def _interval_list() -> str:
    return ", ".join(INTERVALS.keys())


def format_answers(answers: Iterable[tuple[str, str, str]]) -> str:
    """
    回答を `[category] key: value` の行へ整形する。

    Args:
        answers: (category, key, value) の列。
    """

    lines = [f"[{c}] {k}: {v}" for c, k, v in answers]
    return "\n".join(lines)


def reminder_generation_system_prompt() -> str:
    """リマインダー一括生成の system prompt を返す。"""

    return "\n".join(
        [
            "You are a life maintenance assistant.",
            "Based on this person's answers, generate a list of reminders for things they need to do or schedule.",
            "",
            "Rules:",
            "- Generate practical, actionable reminders with specific due dates",
            "- If someone said \"don't remember\" for when they last did something, assume it's overdue and set the date within the next 2 weeks",
            "- For recurring things (oil changes, checkups), set the next one and mark as recurring",
            "- Be specific: \"Schedule annual physical\" not \"Think about health\"",
            "- Set realistic due dates based on urgency",
            "- Keep descriptions to one helpful sentence",
            "- Cover everything their answers suggest they need",
            "- Do not repeat any reminder the person already has",
            "",
            "Return ONLY a JSON array. Each object must have:",
            f'- "category": the life area ({_category_list()})',
            '- "title": short actionable title',
            '- "description": one sentence of context',
            '- "due_date": YYYY-MM-DD',
            '- "recurring": boolean',
            '- "recurrence_label": if recurring, how often (e.g. "Every 6 months", "Yearly")',
            f'- "recurrence_interval": if recurring, one of {_interval_list()} (or null)',
            "",
            "Return ONLY the JSON array, no markdown, no explanation.",
        ]
    )


def reminder_generation_user_prompt(
    *,
    answers: Iterable[tuple[str, str, str]],
    today: date,
    exclude_titles: Sequence[str] = (),
) -> str:
    """リマインダー一括生成の user prompt を返す。"""

    parts = [
        f"Today's date: {format_due_date(today)}",
        "",
        "User's answers:",
        format_answers(answers),
    ]

    # --- 既存（手動/繰り返し）のリマインダーを伝えて重複を減らす ---
    titles = [str(t).strip() for t in exclude_titles if str(t or "").strip()]
    if titles:
        parts.extend(["", "Reminders the person already has (do not duplicate):"])
        parts.extend(f"- {t}" for t in titles)
    return "\n".join(parts)


def quick_add_system_prompt(*, default_due_days: int = 7) -> str:
    """クイック追加（自由入力1件）の system prompt を返す。"""

    return "\n".join(
        [
            "Parse this reminder into structured JSON.",
            "",
            "Return ONLY a JSON object with:",
            f'- "category": one of {_category_list()} (best guess)',
            '- "title": short actionable title',
            '- "description": one helpful sentence (or null)',
            f'- "due_date": YYYY-MM-DD (default: {int(default_due_days)} days from today if no date mentioned)',
            '- "recurring": boolean',
            '- "recurrence_label": if recurring, human-readable (e.g. "Every 6 months")',
            f'- "recurrence_interval": if recurring, machine format, one of {_interval_list()}',
            "",
            "Return ONLY the JSON object, no markdown.",
        ]
    )


def quick_add_user_prompt(*, text: str, today: date) -> str:
    """クイック追加の user prompt を返す。"""

    return "\n".join(
        [
            f"Today is {format_due_date(today)}.",
            "",
            f'"{str(text or "").strip()}"',
        ]
    )
