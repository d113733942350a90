"""
共通ユーティリティ（JSON/LLM出力の最小セット）。

目的:
    - LLM 出力を JSON として読む処理を1箇所で管理する。
    - 許容するのは全体を包むコードフェンス（```json ... ```）だけ。
      前置き付き、末尾カンマ、複数の値の並びなどは読めないものとして失敗させる。
"""

from __future__ import annotations

import json
import re
from typing import Any


# 先頭/末尾のコードフェンス
_LEADING_FENCE_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE_RE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    """全体を包む ```json ... ``` を外す（途中のフェンスには触れない）。"""
    s = str(text or "").strip()
    s = _LEADING_FENCE_RE.sub("", s)
    s = _TRAILING_FENCE_RE.sub("", s)
    return s.strip()


def parse_json_or_raise(text: str) -> Any:
    """フェンスを外した LLM 出力を厳密に JSON として読む（失敗時は ValueError）。"""
    s = strip_code_fences(text)
    if not s:
        raise ValueError("empty JSON text")
    # NOTE: json.JSONDecodeError は ValueError のサブクラス。
    return json.loads(s)
