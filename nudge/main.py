"""
FastAPI エントリポイント

Nudge APIサーバーのメインモジュール。
アプリケーションの初期化、ルーターの登録、起動/終了イベントの登録を行う。
"""

from __future__ import annotations

import pathlib

from fastapi import FastAPI

from nudge.app_bootstrap import (
    bootstrap_runtime_config,
    register_http_routes,
    register_lifecycle_hooks,
)


def create_app(config_path: str | pathlib.Path | None = None) -> FastAPI:
    """
    アプリ生成と初期化を行う。
    設定 -> ログ -> DB -> ルータ登録の順で初期化を実行する。
    """

    # --- 1. 設定・ログ・DB を初期化する ---
    toml_config = bootstrap_runtime_config(config_path)

    # --- 2. FastAPI アプリを作り、配線を登録する ---
    app = FastAPI(title="Nudge API")
    register_http_routes(app)
    register_lifecycle_hooks(app, toml_config=toml_config)
    return app
