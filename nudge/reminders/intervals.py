"""
繰り返し間隔（interval key）の語彙と日付計算。

目的:
    - 機械可読の間隔キー（例: "3_months"）と、日数/月数の差分を1箇所で対応付ける。
    - 人間向けラベル（例: "Every 3 months", "quarterly"）から間隔キーを推定する（補助用途）。

方針:
    - 月の加算は暦月で行う（dateutil.relativedelta）。月末を超える日は、結果月の末日へ寄せる。
      例: 2024-01-31 + 1か月 = 2024-02-29
    - 期限切れのリマインダーは「今日」を起点に次回を決める（過去日の後継を連鎖させない）。
    - 未知のキーはエラーにせず、入力日をそのまま返す（= 繰り返し不可として扱う）。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta


DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class IntervalDelta:
    """間隔キー1件分の差分（months か days のどちらか一方）。"""

    months: int = 0
    days: int = 0

    def as_relativedelta(self) -> relativedelta:
        """relativedelta へ変換する。"""
        return relativedelta(months=self.months, days=self.days)


INTERVALS: dict[str, IntervalDelta] = {
    "1_week": IntervalDelta(days=7),
    "2_weeks": IntervalDelta(days=14),
    "1_month": IntervalDelta(months=1),
    "2_months": IntervalDelta(months=2),
    "3_months": IntervalDelta(months=3),
    "6_months": IntervalDelta(months=6),
    "1_year": IntervalDelta(months=12),
    "2_years": IntervalDelta(months=24),
    "30_days": IntervalDelta(days=30),
    "90_days": IntervalDelta(days=90),
}


# ラベル -> 間隔キー（上から順に評価し、最初の一致を採用する）
# NOTE: "every 2 weeks" が "every week" に、"every 2 years" が "annual" に食われないよう、
#       数字付きの具体的なパターンを先に置く。
LABEL_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), key)
    for pattern, key in (
        (r"every\s+2\s+weeks|bi-?weekly|fortnight", "2_weeks"),
        (r"every\s+(?:1\s+)?week\b|weekly", "1_week"),
        (r"every\s+30\s+days", "30_days"),
        (r"every\s+90\s+days", "90_days"),
        (r"every\s+2\s+months|bi-?monthly", "2_months"),
        (r"every\s+3\s+months|quarterly", "3_months"),
        (r"every\s+6\s+months|semi[- ]?annual|twice\s+a\s+year", "6_months"),
        (r"every\s+(?:1\s+)?month\b|monthly", "1_month"),
        (r"every\s+2\s+years|bi-?ennial", "2_years"),
        (r"every\s+(?:1\s+)?year\b|yearly|annual", "1_year"),
    )
)


def parse_due_date(value: str | date) -> date:
    """YYYY-MM-DD 文字列を date へ変換する（不正なら ValueError）。"""

    if isinstance(value, date):
        return value
    s = str(value or "").strip()
    if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", s):
        raise ValueError(f"invalid date (expected YYYY-MM-DD): {value!r}")
    return date.fromisoformat(s)


def format_due_date(value: date) -> str:
    """date を YYYY-MM-DD 文字列へ変換する。"""

    return value.strftime(DATE_FORMAT)


def is_known_interval(interval_key: Optional[str]) -> bool:
    """語彙に含まれる間隔キーなら True。"""

    return str(interval_key or "") in INTERVALS


def compute_next_due_date(current_due: str, interval_key: Optional[str], *, today: date) -> str:
    """
    次回の期日を返す。

    Args:
        current_due: 現在の期日（YYYY-MM-DD）。
        interval_key: 間隔キー。未知/None の場合は current_due をそのまま返す。
        today: 今日（ローカル暦日）。

    Returns:
        max(current_due, today) に間隔を足した期日（YYYY-MM-DD）。
    """

    # --- 未知のキーは no-op（繰り返し不可） ---
    delta = INTERVALS.get(str(interval_key or ""))
    if delta is None:
        return current_due

    # --- 期限切れなら今日を起点にする ---
    base = parse_due_date(current_due)
    start = base if base > today else today
    return format_due_date(start + delta.as_relativedelta())


def parse_recurrence_label(label: Optional[str]) -> Optional[str]:
    """
    人間向けラベルから間隔キーを推定する（一致しなければ None）。

    例:
        - "Every 6 months" -> "6_months"
        - "quarterly check" -> "3_months"
        - "whenever" -> None
    """

    s = str(label or "").strip()
    if not s:
        return None
    for pattern, key in LABEL_PATTERNS:
        if pattern.search(s):
            return key
    return None


def resolve_interval(explicit: Optional[str], label: Optional[str]) -> Optional[str]:
    """
    保存する recurrence_interval を決める。

    - 明示キーが語彙にあればそれを使う
    - 無ければラベルから推定する
    - どちらも無ければ None（繰り返しの後継は作られない）
    """

    cleaned = str(explicit or "").strip()
    if cleaned in INTERVALS:
        return cleaned
    return parse_recurrence_label(label)
