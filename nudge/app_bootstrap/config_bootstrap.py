"""
起動時の設定・DB初期化。

目的:
    - create_app() から初期化の詳細を切り離す。
    - 設定 -> ログ -> DB の順序を1箇所で固定する。
"""

from __future__ import annotations

import pathlib

from nudge.config import Config, ConfigStore, load_config, set_global_config_store
from nudge.db import init_db, sqlite_url_for_path
from nudge.runtime.logging import setup_logging


def bootstrap_runtime_config(config_path: str | pathlib.Path | None = None) -> Config:
    """
    起動時の初期化を実行し、確定した Config を返す。

    Returns:
        起動完了後にアプリ全体で使う Config。
    """

    # --- 1. TOML 設定を読み込み、ログ設定を先に確定する ---
    toml_config = load_config(config_path)
    setup_logging(
        toml_config.log_level,
        log_file_enabled=toml_config.log_file_enabled,
        log_file_path=toml_config.log_file_path,
        log_file_max_bytes=toml_config.log_file_max_bytes,
        llm_log_level=toml_config.llm_log_level,
    )

    # --- 2. グローバル設定ストアを登録する ---
    set_global_config_store(ConfigStore(toml_config))

    # --- 3. DB を初期化する ---
    init_db(sqlite_url_for_path(toml_config.db_path))
    return toml_config
