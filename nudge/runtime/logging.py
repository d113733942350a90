"""
ログ設定

起動時に1度だけ呼び、ルートロガーへコンソール/ファイルのハンドラを付ける。
LLM 送受信ログは `nudge.llm_io` ロガーへ分け、llm_log_level で独立に絞れるようにする。
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Iterable


_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_LLM_IO_LOGGER_NAME = "nudge.llm_io"


class _AccessPathFilter(logging.Filter):
    """uvicorn.access から特定パスの行を落とすフィルタ。"""

    def __init__(self, paths: Iterable[str]) -> None:
        super().__init__()
        self._paths = tuple(str(p) for p in paths if str(p or "").strip())

    def filter(self, record: logging.LogRecord) -> bool:
        # --- uvicorn.access の args は (client, method, path, http_version, status) ---
        args = record.args
        if isinstance(args, tuple) and len(args) >= 3:
            path = str(args[2] or "")
            path_only = path.split("?", 1)[0]
            if path_only in self._paths:
                return False
        return True


def setup_logging(
    level: str,
    *,
    log_file_enabled: bool = False,
    log_file_path: str | None = None,
    log_file_max_bytes: int = 200_000,
    llm_log_level: str = "INFO",
) -> None:
    """
    ルートロガーを初期化する。

    Args:
        level: ルートのログレベル（DEBUG/INFO/WARNING/ERROR）。
        log_file_enabled: True ならローテーション付きファイルにも出す。
        log_file_path: ファイルログのパス。
        log_file_max_bytes: ローテーションサイズ（bytes）。
        llm_log_level: LLM 送受信ログのレベル（DEBUG/INFO/OFF）。
    """

    # --- ルートロガーのハンドラを作り直す（二重出力を避ける） ---
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(str(level or "INFO").upper())

    formatter = logging.Formatter(_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    # --- ファイルログ（任意） ---
    if log_file_enabled and log_file_path:
        p = Path(log_file_path)
        p.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            str(p),
            maxBytes=int(log_file_max_bytes),
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # --- LLM 送受信ログ ---
    llm_io = logging.getLogger(_LLM_IO_LOGGER_NAME)
    normalized = str(llm_log_level or "INFO").upper()
    if normalized == "OFF":
        llm_io.disabled = True
    else:
        llm_io.disabled = False
        llm_io.setLevel(normalized)


def suppress_uvicorn_access_log_paths(*paths: str) -> None:
    """uvicorn の access log から指定パスを除外する。"""

    access_logger = logging.getLogger("uvicorn.access")
    access_logger.addFilter(_AccessPathFilter(paths))
