"""
HTTP 用の認証ユーティリティ（Bearer トークン）。

目的:
    - Authorization ヘッダの Bearer トークンから、リクエストの利用者（user_id）を決める。

方針:
    - トークンの検証は AuthVerifier に任せる（既定は設定のトークン表）。
    - 外部の認証基盤（OAuth 等）を使う場合は AuthVerifier を差し替える。
    - 以降の全ての読み書きはここで決まった user_id に閉じる。
"""

from __future__ import annotations

import hmac
from typing import Mapping, Optional, Protocol

from fastapi import Depends, HTTPException, Request, status

from nudge.config import get_config_store


class AuthVerifier(Protocol):
    """トークン -> user_id の検証境界。"""

    def verify(self, token: str) -> Optional[str]:
        """有効なら user_id、無効なら None を返す。"""
        ...


class TokenTableAuthVerifier:
    """設定の `api_tokens`（トークン -> user_id）で検証する。"""

    def __init__(self, tokens: Mapping[str, str]) -> None:
        self._tokens = {str(k): str(v) for k, v in tokens.items()}

    def verify(self, token: str) -> Optional[str]:
        provided = str(token or "")
        if not provided:
            return None
        # --- 定数時間比較で全件を見る ---
        for expected, user_id in self._tokens.items():
            if hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
                return user_id
        return None


def get_auth_verifier() -> AuthVerifier:
    """現在の設定から AuthVerifier を返す。"""

    return TokenTableAuthVerifier(get_config_store().config.api_tokens)


def _bearer_token_from_header(auth_header: str | None) -> str:
    """Authorization ヘッダから Bearer トークンを取り出す（無ければ空文字）。"""

    raw = str(auth_header or "").strip()
    if not raw:
        return ""

    # --- 形式: "Bearer <TOKEN>" ---
    if not raw.lower().startswith("bearer "):
        return ""
    return raw.split(" ", 1)[1].strip()


def require_user(
    request: Request,
    verifier: AuthVerifier = Depends(get_auth_verifier),
) -> str:
    """HTTP リクエストで Bearer 認証を必須にし、user_id を返す。"""

    # --- Authorization ヘッダを検証 ---
    token = _bearer_token_from_header(request.headers.get("Authorization"))
    user_id = verifier.verify(token) if token else None
    if user_id:
        return user_id

    # --- 失敗 ---
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )
