"""
アプリ起動配線パッケージ。

目的:
    - 起動時の配線を `main.py` から分離する。
    - 初期化手順を責務ごとに読みやすく保つ。
"""

from __future__ import annotations

from nudge.app_bootstrap.config_bootstrap import bootstrap_runtime_config
from nudge.app_bootstrap.dependencies import (
    get_clock_service_dep,
    get_config_store_dep,
    get_db_dep,
    get_duplicate_matcher,
    get_llm_client,
    get_quick_add_default_due_days,
    get_reminder_generator,
    get_user_repo,
)
from nudge.app_bootstrap.lifecycle import register_lifecycle_hooks
from nudge.app_bootstrap.routers import register_http_routes

__all__ = [
    "bootstrap_runtime_config",
    "get_clock_service_dep",
    "get_config_store_dep",
    "get_db_dep",
    "get_duplicate_matcher",
    "get_llm_client",
    "get_quick_add_default_due_days",
    "get_reminder_generator",
    "get_user_repo",
    "register_http_routes",
    "register_lifecycle_hooks",
]
