"""
アプリライフサイクル登録。

目的:
    - startup / shutdown の副作用を 1 箇所へ集約する。
    - `main.py` は登録呼び出しだけにする。
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from nudge.config import Config
from nudge.runtime.logging import suppress_uvicorn_access_log_paths


logger = logging.getLogger(__name__)


def register_lifecycle_hooks(app: FastAPI, *, toml_config: Config) -> None:
    """
    FastAPI の startup / shutdown フックを登録する。
    """

    # --- access log のノイズ抑制は startup 時に確実に付与する ---
    @app.on_event("startup")
    async def suppress_noisy_uvicorn_access_logs() -> None:
        """頻繁なアクセスログを uvicorn.access から除外する。"""

        suppress_uvicorn_access_log_paths("/api/health", "/favicon.ico")

    @app.on_event("startup")
    async def log_startup() -> None:
        """起動時の主要設定をログに残す。"""

        logger.info(
            "nudge started",
            extra={
                "port": toml_config.port,
                "llm_model": toml_config.llm_model,
                "duplicate_strategy": toml_config.duplicate_strategy,
                "users": len(toml_config.api_tokens),
            },
        )

    @app.on_event("shutdown")
    async def log_shutdown() -> None:
        """終了をログに残す。"""

        logger.info("nudge stopped")
