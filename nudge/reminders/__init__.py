"""
リマインダー機能パッケージ。

目的:
    - 回答（answers）からリマインダーを作り、完了/再発/再質問（check-in）まで回す中核ロジックを集約する。
    - HTTP や LLM の詳細は持たず、repo / generator / clock を注入して使う。
"""

from __future__ import annotations
