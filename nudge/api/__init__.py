"""
HTTP API パッケージ。

目的:
    - FastAPI router を機能ごとに分ける。
    - router は薄く保ち、判断は reminders パッケージへ寄せる。
"""

from __future__ import annotations
