"""
アプリ内時計サービス。

目的:
    - 「今日」「今」の取得を1箇所に集約し、中核ロジックへ注入できるようにする。
    - 実時間（system）と、検証用に進められる論理時間（domain）を分離する。
      再質問（check-in）の鮮度判定などを、実時間待ちなしで検証できるようにする。
"""

from __future__ import annotations

from datetime import date, datetime, timezone
import threading
import time
from typing import Callable


class ClockService:
    """
    アプリ内で共有する時計サービス。

    方針:
        - system時刻: time_func（既定は time.time）をそのまま使う。
        - domain時刻: system時刻 + offset秒。業務判定（今日/鮮度）は domain 時刻を使う。
        - 「今日」は domain 時刻のローカル暦日とする。
    """

    def __init__(self, time_func: Callable[[], float] | None = None) -> None:
        # --- 時刻源（テストでは固定値を注入する） ---
        self._time_func = time_func or time.time

        # --- 可変状態（domainのオフセット秒） ---
        self._lock = threading.Lock()
        self._domain_offset_seconds = 0

    def now_utc_ts(self) -> int:
        """domain時刻（UTC epoch seconds）を返す。"""

        # --- offsetを読み取り、system時刻へ加算 ---
        with self._lock:
            offset = int(self._domain_offset_seconds)
        return int(self._time_func()) + int(offset)

    def now_utc(self) -> datetime:
        """domain時刻を tz 付き datetime（UTC）で返す。"""

        return datetime.fromtimestamp(self.now_utc_ts(), tz=timezone.utc)

    def today(self) -> date:
        """domain時刻のローカル暦日を返す。"""

        return datetime.fromtimestamp(self.now_utc_ts(), tz=timezone.utc).astimezone().date()

    def advance_domain_seconds(self, *, seconds: int) -> int:
        """
        domain時刻を前進させる。

        Returns:
            変更後のoffset秒。
        """

        delta = int(seconds)
        if delta <= 0:
            raise ValueError("seconds must be >= 1")

        with self._lock:
            self._domain_offset_seconds = int(self._domain_offset_seconds) + int(delta)
            return int(self._domain_offset_seconds)

    def reset_domain_offset(self) -> None:
        """domain時刻オフセットを0へ戻す。"""

        with self._lock:
            self._domain_offset_seconds = 0


_clock_service = ClockService()


def get_clock_service() -> ClockService:
    """時計サービスのシングルトンを返す。"""

    return _clock_service
