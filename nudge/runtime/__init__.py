"""
実行時基盤パッケージ（ログ設定など）。
"""

from __future__ import annotations
