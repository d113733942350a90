"""
設定読み込みとランタイム設定ストア

TOML設定ファイルの読み込みと、実行時に使用する設定の管理を行う。
設定は起動時に読み込まれ、ConfigStore 経由で HTTP 境界から参照される。
中核ロジック（reminders パッケージ）は設定を直接読まず、必要な値だけを引数で受け取る。
"""

from __future__ import annotations

import pathlib
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

import tomli

from nudge import paths


_DUPLICATE_STRATEGIES = ("substring", "token_overlap")


@dataclass
class Config:
    """
    TOML起動設定（起動時のみ使用、変更不可）。
    待受ポート、認証トークン、ログ、LLM、DB の設定を保持する。
    """
    port: int            # API の待受ポート
    api_tokens: Dict[str, str]  # Bearerトークン -> ユーザーID
    log_level: str       # ログレベル（DEBUG, INFO, WARNING, ERROR）
    llm_log_level: str   # LLM送受信ログレベル（DEBUG, INFO, OFF）
    llm_model: str       # LiteLLM のモデル名
    llm_api_key: Optional[str]   # LLM APIキー（未指定ならプロバイダ既定の環境変数）
    llm_base_url: Optional[str]  # OpenAI互換エンドポイント（ローカルLLM等）
    llm_timeout_seconds: int     # LLM API のタイムアウト秒数
    llm_max_tokens: int  # リマインダー生成の最大トークン数
    db_path: str         # SQLite ファイルパス
    log_file_enabled: bool  # ファイルログ有効/無効
    log_file_path: str      # ファイルログの保存先パス
    log_file_max_bytes: int  # ファイルログのローテーションサイズ（bytes）
    quick_add_default_due_days: int  # クイック追加で期日が無いときの既定日数
    duplicate_strategy: str  # 重複判定の方式（substring / token_overlap）
    duplicate_token_overlap_threshold: float  # token_overlap の採用しきい値（0.0..1.0）


class ConfigStore:
    """
    ランタイム設定ストア。
    スレッドセーフに設定を保持し、HTTP 境界の依存解決から参照される。
    """

    def __init__(self, toml_config: Config) -> None:
        self._toml = toml_config
        self._lock = threading.Lock()

    @property
    def config(self) -> Config:
        """現在の Config を返す。"""
        with self._lock:
            return self._toml


def _require(config_dict: dict, key: str) -> Any:
    """
    設定辞書から必須キーを取得する。
    キーが存在しないか空の場合はValueErrorを発生させる。
    """
    if key not in config_dict or config_dict[key] in (None, ""):
        raise ValueError(f"config key '{key}' is required")
    return config_dict[key]


def _optional_str(config_dict: dict, key: str) -> Optional[str]:
    """空文字を None に寄せて文字列設定を取得する。"""
    v = str(config_dict.get(key) or "").strip()
    return v or None


def parse_config(data: dict) -> Config:
    """
    TOML をパースした dict から Config を構築する。
    許可されていないキーが含まれる場合はエラーを発生させる。
    """
    # 許可されたキーのみを受け付ける
    allowed_keys = {
        "port",
        "api_tokens",
        "log_level",
        "llm_log_level",
        "llm_model",
        "llm_api_key",
        "llm_base_url",
        "llm_timeout_seconds",
        "llm_max_tokens",
        "db_path",
        "log_file_enabled",
        "log_file_path",
        "log_file_max_bytes",
        "quick_add_default_due_days",
        "duplicate_strategy",
        "duplicate_token_overlap_threshold",
    }
    unknown_keys = sorted(set(data.keys()) - allowed_keys)
    if unknown_keys:
        keys = ", ".join(repr(k) for k in unknown_keys)
        raise ValueError(f"unknown config key(s): {keys} (allowed: {sorted(allowed_keys)})")

    # --- 認証トークン表（必須・1件以上） ---
    # NOTE: ユーザーの発行/OAuth は扱わない。トークンとユーザーIDの対応だけを持つ。
    raw_tokens = _require(data, "api_tokens")
    if not isinstance(raw_tokens, dict) or not raw_tokens:
        raise ValueError("api_tokens must be a non-empty table of token = user_id")
    api_tokens: Dict[str, str] = {}
    for token, user_id in raw_tokens.items():
        t = str(token or "").strip()
        u = str(user_id or "").strip()
        if not t or not u:
            raise ValueError("api_tokens entries must have non-empty token and user_id")
        api_tokens[t] = u

    # --- LLMタイムアウト（必須・正の整数） ---
    # NOTE: 0以下だと実質的に「無限待ち」になり得るため、起動時に弾く。
    llm_timeout_seconds = int(_require(data, "llm_timeout_seconds"))
    if llm_timeout_seconds <= 0:
        raise ValueError("llm_timeout_seconds must be a positive integer")

    llm_max_tokens = int(data.get("llm_max_tokens", 2000))
    if llm_max_tokens <= 0:
        raise ValueError("llm_max_tokens must be a positive integer")

    # --- クイック追加の既定期日 ---
    quick_add_default_due_days = int(data.get("quick_add_default_due_days", 7))
    if quick_add_default_due_days < 0:
        raise ValueError("quick_add_default_due_days must be >= 0")

    # --- 重複判定の方式 ---
    duplicate_strategy = str(data.get("duplicate_strategy", "substring")).strip().lower()
    if duplicate_strategy not in _DUPLICATE_STRATEGIES:
        raise ValueError(f"duplicate_strategy must be one of {_DUPLICATE_STRATEGIES}")
    duplicate_token_overlap_threshold = float(data.get("duplicate_token_overlap_threshold", 0.6))
    if not 0.0 < duplicate_token_overlap_threshold <= 1.0:
        raise ValueError("duplicate_token_overlap_threshold must be in (0.0, 1.0]")

    # --- パスは相対指定なら app_root 基準に解決する ---
    raw_db_path = str(data.get("db_path", str(paths.get_db_dir() / "nudge.db")))
    raw_log_file_path = str(data.get("log_file_path", str(paths.get_logs_dir() / "nudge.log")))

    return Config(
        port=int(_require(data, "port")),
        api_tokens=api_tokens,
        log_level=str(_require(data, "log_level")).upper(),
        llm_log_level=str(data.get("llm_log_level", "INFO")).upper(),
        llm_model=str(_require(data, "llm_model")),
        llm_api_key=_optional_str(data, "llm_api_key"),
        llm_base_url=_optional_str(data, "llm_base_url"),
        llm_timeout_seconds=llm_timeout_seconds,
        llm_max_tokens=llm_max_tokens,
        db_path=str(paths.resolve_path_under_app_root(raw_db_path)),
        log_file_enabled=bool(data.get("log_file_enabled", False)),
        log_file_path=str(paths.resolve_path_under_app_root(raw_log_file_path)),
        log_file_max_bytes=int(data.get("log_file_max_bytes", 200_000)),
        quick_add_default_due_days=quick_add_default_due_days,
        duplicate_strategy=duplicate_strategy,
        duplicate_token_overlap_threshold=duplicate_token_overlap_threshold,
    )


def load_config(path: str | pathlib.Path | None = None) -> Config:
    """
    TOML設定ファイルを読み込む。
    """
    # --- 設定ファイルは config/setting.toml を既定にする ---
    config_path = pathlib.Path(paths.get_default_config_file_path() if path is None else path)
    config_path = paths.resolve_path_under_app_root(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"config file not found: {config_path}")

    # TOMLファイルをパース
    with config_path.open("rb") as f:
        data = tomli.load(f)
    return parse_config(data)


# グローバル設定ストア（シングルトン）
_config_store: ConfigStore | None = None


def set_global_config_store(store: ConfigStore) -> None:
    """グローバルConfigStoreを設定。起動時に一度だけ呼び出される。"""
    global _config_store
    _config_store = store


def get_config_store() -> ConfigStore:
    """
    グローバルConfigStoreを取得。
    初期化されていない場合はRuntimeErrorを発生させる。
    """
    if _config_store is None:
        raise RuntimeError("ConfigStore not initialized")
    return _config_store
