"""
依存オブジェクトの生成。

目的:
    - FastAPI の Depends で使う生成処理を起動配線側に寄せる。
    - 中核ロジックへ渡す repo / generator / matcher / clock をここで組み立てる。
      テストは `app.dependency_overrides` でこれらを差し替える。
"""

from __future__ import annotations

from typing import Iterator

from fastapi import Depends
from sqlalchemy.orm import Session

from nudge.api.http_auth import require_user
from nudge.clock import ClockService, get_clock_service
from nudge.config import ConfigStore, get_config_store
from nudge.db import get_db
from nudge.llm_client import LlmClient
from nudge.reminders.dedup import DuplicateMatcher, build_duplicate_matcher
from nudge.reminders.generation import LlmReminderGenerator, ReminderGenerator
from nudge.reminders.repo import ReminderRepository


def get_config_store_dep() -> ConfigStore:
    """
    ConfigStore を Depends 用に返す。
    """

    return get_config_store()


def get_clock_service_dep() -> ClockService:
    """
    ClockService を Depends 用に返す。
    """

    # --- system/domain 時刻は共有サービスを返す ---
    return get_clock_service()


def get_db_dep() -> Iterator[Session]:
    """
    DB セッションを Depends 用に返す（1リクエスト=1トランザクション）。
    """

    yield from get_db()


def get_llm_client(config_store: ConfigStore = Depends(get_config_store_dep)) -> LlmClient:
    """
    現在の ConfigStore から LlmClient を生成する。
    """

    # --- 現在の設定を読み、クライアントへ転写する ---
    cfg = config_store.config
    return LlmClient(
        model=cfg.llm_model,
        api_key=cfg.llm_api_key,
        llm_base_url=cfg.llm_base_url,
        max_tokens=cfg.llm_max_tokens,
        timeout_seconds=cfg.llm_timeout_seconds,
    )


def get_reminder_generator(
    llm_client: LlmClient = Depends(get_llm_client),
    config_store: ConfigStore = Depends(get_config_store_dep),
) -> ReminderGenerator:
    """
    ReminderGenerator を Depends 用に返す。
    """

    return LlmReminderGenerator(
        llm_client,
        quick_add_default_due_days=config_store.config.quick_add_default_due_days,
    )


def get_duplicate_matcher(config_store: ConfigStore = Depends(get_config_store_dep)) -> DuplicateMatcher:
    """
    設定に応じた DuplicateMatcher を返す。
    """

    cfg = config_store.config
    return build_duplicate_matcher(cfg.duplicate_strategy, threshold=cfg.duplicate_token_overlap_threshold)


def get_quick_add_default_due_days(config_store: ConfigStore = Depends(get_config_store_dep)) -> int:
    """クイック追加で期日が無いときの既定日数を返す。"""

    return int(config_store.config.quick_add_default_due_days)


def get_user_repo(
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db_dep),
    clock: ClockService = Depends(get_clock_service_dep),
) -> ReminderRepository:
    """
    認証済みユーザーの行を用意したうえで ReminderRepository を返す。
    """

    repo = ReminderRepository(db)
    repo.ensure_user(user_id, now_ts=clock.now_utc_ts())
    return repo
