"""
アプリのファイル配置（設定/DB/ログ）を解決する。

方針:
    - 既定の保存先は app_root（リポジトリ直下）配下にまとめる。
    - 相対パス指定は app_root 基準で解決する（起動ディレクトリに依存しない）。
    - 環境変数 NUDGE_HOME があれば app_root として優先する。
"""

from __future__ import annotations

import os
from pathlib import Path


def get_app_root_dir() -> Path:
    """アプリのルートディレクトリを返す。"""

    # --- 明示指定を最優先 ---
    env = str(os.environ.get("NUDGE_HOME") or "").strip()
    if env:
        return Path(env).resolve()

    # --- 通常実行は package の1つ上 ---
    return Path(__file__).resolve().parent.parent


def get_config_dir() -> Path:
    """設定ディレクトリ（config/）を返す。"""

    return get_app_root_dir() / "config"


def get_default_config_file_path() -> Path:
    """既定の設定ファイル（config/setting.toml）を返す。"""

    return get_config_dir() / "setting.toml"


def get_data_dir() -> Path:
    """データディレクトリ（data/）を返す。"""

    return get_app_root_dir() / "data"


def get_db_dir() -> Path:
    """DB 保存先ディレクトリを返す。"""

    return get_data_dir() / "db"


def get_logs_dir() -> Path:
    """ログ保存先ディレクトリを返す。"""

    return get_app_root_dir() / "logs"


def resolve_path_under_app_root(path: str | Path) -> Path:
    """相対パスなら app_root 基準で解決して返す。"""

    p = Path(path)
    if p.is_absolute():
        return p
    return (get_app_root_dir() / p).resolve()
