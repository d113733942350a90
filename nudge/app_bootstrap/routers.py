"""
HTTP ルート登録。

目的:
    - router 登録の配線をまとめる。
    - `main.py` から HTTP 配線の詳細を外す。
"""

from __future__ import annotations

from fastapi import FastAPI

from nudge.api import account, answers, checkins, generate, reminders


def register_http_routes(app: FastAPI) -> None:
    """
    API router を登録する。
    """

    # --- 認証付き API router を登録する（認証は各ルートの require_user） ---
    app.include_router(answers.router, prefix="/api", tags=["answers"])
    app.include_router(generate.router, prefix="/api", tags=["generate"])
    app.include_router(reminders.router, prefix="/api", tags=["reminders"])
    app.include_router(checkins.router, prefix="/api", tags=["checkins"])
    app.include_router(account.router, prefix="/api", tags=["account"])

    # --- ヘルスチェックを登録する ---
    @app.get("/api/health")
    async def health() -> dict[str, str]:
        """稼働確認用のヘルスチェックを返す。"""

        return {"status": "healthy"}
