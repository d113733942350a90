"""
リマインダー中核の例外。

方針:
    - 呼び出し側（HTTP 境界）へ「失敗」を明示的に伝えるものだけを例外にする。
    - 未知の繰り返し間隔、回答なし、再質問不要などは例外にせず、中核の中で no-op として吸収する。
"""

from __future__ import annotations


class NudgeError(Exception):
    """中核ロジックの基底例外。"""


class MalformedUpstreamDataError(NudgeError):
    """LLM 応答が構造化データとして読めない（JSON不正/必須項目欠落）。"""


class GenerationError(NudgeError):
    """生成（LLM 呼び出し）自体が失敗した。"""


class NoAnswersError(NudgeError):
    """回答が1件も無いため再生成できない。"""


class ReminderNotFoundError(NudgeError):
    """対象のリマインダーが存在しない、または他ユーザーのもの。"""


class ReminderStateError(NudgeError):
    """リマインダーの状態遷移として許されない操作（完了の取り消しなど）。"""


class CheckinNotFoundError(NudgeError):
    """対象の再質問が存在しない、または他ユーザーのもの。"""


class CheckinClosedError(NudgeError):
    """回答済み/却下済みの再質問に対する操作。"""
