"""
reminders 用DBアクセス。

目的:
    - users / answers / reminders / checkins の主要操作を1箇所に集約する。
    - 全ての読み書きを user_id で絞り、他ユーザーの行に触れないことをここで保証する。

方針:
    - commit はしない（呼び出し側のセッションスコープ = 1トランザクション）。
    - 書き込み直後に値を読み直したい場合は flush + refresh を使う。
"""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy.orm import Session

from nudge.models import SOURCE_AI, Answer, CheckIn, Reminder, User


class ReminderRepository:
    """ユーザー単位で閉じたリポジトリ。"""

    def __init__(self, session: Session) -> None:
        self.session = session

    # --- users ---

    def ensure_user(self, user_id: str, *, now_ts: int) -> User:
        """ユーザー行を返す（無ければ作る）。"""

        user = self.session.get(User, str(user_id))
        if user is None:
            user = User(id=str(user_id), onboarding_complete=False, last_generated_at=None, created_at=int(now_ts))
            self.session.add(user)
            self.session.flush()
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        """ユーザー行を返す（無ければ None）。"""

        return self.session.get(User, str(user_id))

    def mark_onboarding_complete(self, user_id: str, *, complete: bool = True) -> None:
        """オンボーディング完了フラグを更新する。"""

        self.session.query(User).filter(User.id == str(user_id)).update(
            {User.onboarding_complete: bool(complete)}, synchronize_session="fetch"
        )

    def mark_generated(self, user_id: str, *, now_ts: int) -> None:
        """直近の再生成時刻を記録する。"""

        self.session.query(User).filter(User.id == str(user_id)).update(
            {User.last_generated_at: int(now_ts)}, synchronize_session="fetch"
        )

    # --- answers ---

    def list_answers(self, user_id: str) -> list[Answer]:
        """回答を作成順で返す。"""

        return (
            self.session.query(Answer)
            .filter(Answer.user_id == str(user_id))
            .order_by(Answer.created_at.asc(), Answer.id.asc())
            .all()
        )

    def get_answer(self, user_id: str, key: str) -> Optional[Answer]:
        """(user, key) の回答を返す（無ければ None）。"""

        return (
            self.session.query(Answer)
            .filter(Answer.user_id == str(user_id), Answer.key == str(key))
            .one_or_none()
        )

    def upsert_answer(self, user_id: str, *, category: str, key: str, value: str, now_ts: int) -> Answer:
        """
        (user, key) で回答を upsert する。

        - 既存なら value/category を上書きし、updated_at を更新する
        - 無ければ作成する
        """

        row = self.get_answer(user_id, key)
        if row is None:
            row = Answer(
                user_id=str(user_id),
                category=str(category),
                key=str(key),
                value=str(value),
                created_at=int(now_ts),
                updated_at=int(now_ts),
            )
            self.session.add(row)
        else:
            row.category = str(category)
            row.value = str(value)
            row.updated_at = int(now_ts)
        self.session.flush()
        return row

    # --- reminders ---

    def list_reminders(self, user_id: str) -> list[Reminder]:
        """リマインダーを期日順で返す。"""

        return (
            self.session.query(Reminder)
            .filter(Reminder.user_id == str(user_id))
            .order_by(Reminder.due_date.asc(), Reminder.id.asc())
            .all()
        )

    def get_reminder(self, user_id: str, reminder_id: int) -> Optional[Reminder]:
        """所有者一致のリマインダーを返す（無ければ None）。"""

        return (
            self.session.query(Reminder)
            .filter(Reminder.user_id == str(user_id), Reminder.id == int(reminder_id))
            .one_or_none()
        )

    def add_reminder(self, reminder: Reminder) -> Reminder:
        """リマインダーを追加し、採番済みの行を返す。"""

        self.session.add(reminder)
        self.session.flush()
        return reminder

    def add_reminders(self, reminders: Iterable[Reminder]) -> list[Reminder]:
        """複数のリマインダーを追加する。"""

        rows = list(reminders)
        self.session.add_all(rows)
        self.session.flush()
        return rows

    def delete_reminder(self, user_id: str, reminder_id: int) -> bool:
        """所有者一致のリマインダーを削除する。削除したら True。"""

        n = (
            self.session.query(Reminder)
            .filter(Reminder.user_id == str(user_id), Reminder.id == int(reminder_id))
            .delete(synchronize_session="fetch")
        )
        return int(n or 0) > 0

    def delete_regenerable_reminders(self, user_id: str) -> int:
        """
        再生成で置き換える対象（source=ai かつ未完了）を削除する。

        Returns:
            削除件数。
        """

        n = (
            self.session.query(Reminder)
            .filter(
                Reminder.user_id == str(user_id),
                Reminder.source == SOURCE_AI,
                Reminder.completed.is_(False),
            )
            .delete(synchronize_session="fetch")
        )
        return int(n or 0)

    def refresh(self, row: object) -> None:
        """書き込みを flush し、DB の値で読み直す。"""

        self.session.flush()
        self.session.refresh(row)

    # --- checkins ---

    def list_open_checkins(self, user_id: str) -> list[CheckIn]:
        """未回答かつ未却下の再質問を作成順で返す。"""

        return (
            self.session.query(CheckIn)
            .filter(
                CheckIn.user_id == str(user_id),
                CheckIn.dismissed.is_(False),
                CheckIn.answered.is_(False),
            )
            .order_by(CheckIn.created_at.asc(), CheckIn.id.asc())
            .all()
        )

    def get_checkin(self, user_id: str, checkin_id: int) -> Optional[CheckIn]:
        """所有者一致の再質問を返す（無ければ None）。"""

        return (
            self.session.query(CheckIn)
            .filter(CheckIn.user_id == str(user_id), CheckIn.id == int(checkin_id))
            .one_or_none()
        )

    def add_checkin(self, checkin: CheckIn) -> CheckIn:
        """再質問を追加する。"""

        self.session.add(checkin)
        self.session.flush()
        return checkin

    # --- reset ---

    def reset_user(self, user_id: str) -> None:
        """リマインダー/再質問/回答を全削除し、オンボーディングと直近の生成時刻を初期状態へ戻す。"""

        uid = str(user_id)
        # NOTE: parent_id は ON DELETE SET NULL なので削除順は問わない。
        self.session.query(Reminder).filter(Reminder.user_id == uid).delete(synchronize_session="fetch")
        self.session.query(CheckIn).filter(CheckIn.user_id == uid).delete(synchronize_session="fetch")
        self.session.query(Answer).filter(Answer.user_id == uid).delete(synchronize_session="fetch")
        self.session.query(User).filter(User.id == uid).update(
            {User.onboarding_complete: False, User.last_generated_at: None}, synchronize_session="fetch"
        )
