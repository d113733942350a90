"""
DB（nudge.db）接続とセッション管理

回答・リマインダー・再質問（check-in）は全てユーザー単位で分離され、1つの SQLite に保存する。
エンジンとセッションファクトリは明示的に生成し、HTTP 境界（Depends）やテストから注入する。
"""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


logger = logging.getLogger(__name__)

# nudge.db 用 Base
Base = declarative_base()

# グローバルセッション（アプリ起動時に init_db で作る）
SessionLocal: sessionmaker | None = None


def sqlite_url_for_path(db_path: str | Path) -> str:
    """SQLite ファイルパスから SQLAlchemy URL を作る。"""

    return f"sqlite:///{Path(db_path)}"


def create_db_engine(db_url: str) -> Engine:
    """
    SQLAlchemy エンジンを作ってテーブルを作成する。

    NOTE:
    - `sqlite://`（インメモリ）は接続ごとに別DBになるため StaticPool で1接続に固定する。
    - マイグレーションは扱わない（create_all のみ）。
    """

    connect_args = {"check_same_thread": False, "timeout": 10.0}
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        engine = create_engine(db_url, future=True, connect_args=connect_args, poolclass=StaticPool)
    else:
        # --- ファイルDBは親ディレクトリを先に作る ---
        db_file = db_url.removeprefix("sqlite:///")
        Path(db_file).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(db_url, future=True, connect_args=connect_args)

    # --- 外部キー制約を有効化する（parent_id の参照整合性） ---
    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # テーブル群を作成（モデル import が必要）
    import nudge.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    """エンジンに紐づくセッションファクトリを返す。"""

    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_db(db_url: str) -> sessionmaker:
    """
    DB を初期化する（起動時）。

    - エンジンとテーブルを作成する
    - グローバルのセッションファクトリを差し替える
    """

    global SessionLocal

    engine = create_db_engine(db_url)
    SessionLocal = build_session_factory(engine)
    logger.info("nudge DB initialized: %s", db_url)
    return SessionLocal


def get_db() -> Iterator[Session]:
    """
    DB のセッションを取得する（FastAPI依存性注入用）。

    正常終了時はコミット、例外時はロールバックする。
    1リクエスト=1トランザクションとして扱う。
    """

    if SessionLocal is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    with session_scope(SessionLocal) as session:
        yield session


@contextlib.contextmanager
def session_scope(factory: sessionmaker | None = None) -> Iterator[Session]:
    """
    セッションスコープ（with文用）。

    正常終了時はコミット、例外時はロールバックする。
    """

    factory = factory or SessionLocal
    if factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
