"""
nudge.db の ORM モデル定義

ユーザー（users）、回答（answers）、リマインダー（reminders）、再質問（checkins）を定義する。

保存形式:
    - 暦日（due_date / snoozed_until）は "YYYY-MM-DD" の文字列で保存する（外部との受け渡し形式をそのまま保つ）。
    - 時刻（created_at / updated_at など）は UTC の UNIX 秒で保存する（比較・ソートが簡単なため）。
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from nudge.db import Base


# リマインダーの分類（生活領域）
CATEGORIES: tuple[str, ...] = ("health", "car", "home", "finance", "personal", "pets")

# リマインダーの出自
SOURCE_MANUAL = "manual"
SOURCE_AI = "ai"
SOURCE_RECURRENCE = "recurrence"


class User(Base):
    """ユーザー（認証済み ID の受け皿）。"""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    onboarding_complete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # --- 直近の再生成時刻（表示/監査用。挙動の判定には使わない） ---
    last_generated_at: Mapped[Optional[int]] = mapped_column(Integer)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)


class Answer(Base):
    """
    オンボーディング/再質問の回答。

    - (user_id, key) で1行。書き込みは upsert。
    - 書き込みのたびに updated_at を更新する（鮮度判定の基準）。
    """

    __tablename__ = "answers"
    __table_args__ = (UniqueConstraint("user_id", "key", name="uq_answers_user_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    key: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False)


class Reminder(Base):
    """
    1件の実行可能なタスク。

    - completed は一方向（open -> completed）。
    - recurring かつ recurrence_interval が有効なら、完了時に後継（source=recurrence）を1件作る。
    """

    __tablename__ = "reminders"
    __table_args__ = (
        CheckConstraint("source IN ('manual', 'ai', 'recurrence')", name="ck_reminders_source"),
        Index("ix_reminders_user_due", "user_id", "due_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # --- 内容 ---
    category: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    due_date: Mapped[str] = mapped_column(Text, nullable=False)  # YYYY-MM-DD

    # --- 繰り返し ---
    recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurrence_label: Mapped[Optional[str]] = mapped_column(Text)
    recurrence_interval: Mapped[Optional[str]] = mapped_column(Text)

    # --- 状態 ---
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[Optional[int]] = mapped_column(Integer)
    snoozed_until: Mapped[Optional[str]] = mapped_column(Text)  # YYYY-MM-DD

    # --- 出自 ---
    source: Mapped[str] = mapped_column(Text, nullable=False, default=SOURCE_MANUAL)
    # NOTE: 親が削除されても後継は残す（参照だけ外す）。
    parent_id: Mapped[Optional[int]] = mapped_column(ForeignKey("reminders.id", ondelete="SET NULL"))

    created_at: Mapped[int] = mapped_column(Integer, nullable=False)


class CheckIn(Base):
    """
    鮮度切れの回答に対する再質問。

    - dismissed / answered はどちらも終端（自動で再オープンしない）。
    - (user_id, key) ごとに open は高々1件（スケジューラ側で保証する）。
    """

    __tablename__ = "checkins"
    __table_args__ = (Index("ix_checkins_user_open", "user_id", "dismissed", "answered"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    key: Mapped[str] = mapped_column(Text, nullable=False)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    due_date: Mapped[str] = mapped_column(Text, nullable=False)  # YYYY-MM-DD（作成日）
    dismissed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    answered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)
