"""
回答の鮮度判定。

目的:
    - 「前回の回答から一定月数が過ぎたら聞き直す」ための固定ルール表を持つ。
    - ルール表はユーザー設定ではなく、アプリ同梱の固定データとして扱う。

方針:
    - しきい値は暦月（dateutil.relativedelta）で計算する。
    - 判定は「しきい値より厳密に古い」場合だけ stale とする（境界ちょうどは stale ではない）。
    - ルール表に無いキーは決して stale にならない。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from dateutil.relativedelta import relativedelta


@dataclass(frozen=True)
class StalenessRule:
    """鮮度ルール1件（分類/キー/しきい値月数/再質問文）。"""

    category: str
    key: str
    months: int
    prompt: str


STALENESS_RULES: tuple[StalenessRule, ...] = (
    StalenessRule("car", "car_mileage", 6, "How many miles on your car now?"),
    StalenessRule("car", "last_oil_change", 6, "Have you gotten an oil change recently?"),
    StalenessRule("health", "last_checkup", 12, "Have you seen a doctor this year?"),
    StalenessRule("health", "last_dentist", 6, "Been to the dentist lately?"),
    StalenessRule("finance", "last_credit_check", 6, "Checked your credit recently?"),
    StalenessRule("pets", "last_vet_visit", 12, "Has your pet been to the vet this year?"),
    StalenessRule("home", "last_deep_clean", 3, "Time for another deep clean?"),
)


def find_rule(
    category: str,
    key: str,
    rules: tuple[StalenessRule, ...] = STALENESS_RULES,
) -> Optional[StalenessRule]:
    """(category, key) に対応するルールを返す（無ければ None）。"""

    for rule in rules:
        if rule.category == category and rule.key == key:
            return rule
    return None


def is_stale(updated_at_ts: int, threshold_months: int, *, now: datetime) -> bool:
    """
    回答が古いかを判定する。

    Args:
        updated_at_ts: 回答の最終更新時刻（UTC UNIX 秒）。
        threshold_months: しきい値（月）。
        now: 現在時刻（tz 付き）。

    Returns:
        updated_at < now - threshold_months なら True。
    """

    # --- tz 無しは UTC とみなす ---
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    cutoff = now - relativedelta(months=int(threshold_months))
    updated = datetime.fromtimestamp(int(updated_at_ts), tz=timezone.utc)
    return updated < cutoff
