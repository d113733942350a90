"""
リマインダー題名の重複判定。

目的:
    - 再生成で提案された題名が、既に追跡中の題名と同じタスクかを判定する。
    - 判定方式を差し替えられるよう、DuplicateMatcher という小さな境界を置く。

方針（既定: substring）:
    - 正規化（小文字化、[a-z0-9 空白] 以外を除去、空白を1つに詰めて trim）した上で、
      一致/包含（どちら向きでも）なら重複とみなす。
    - 包含判定は緩め（"Vet visit" と "Annual vet visit checkup" も重複になる）。
    - 正規化後に空になる題名は、何とも一致させない（空文字は全文字列に含まれてしまうため）。
"""

from __future__ import annotations

import re
from typing import Iterable, Protocol


_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_SPACES_RE = re.compile(r"\s+")


def normalize_title(text: str | None) -> str:
    """題名を比較用に正規化する。"""

    s = str(text or "").lower()
    s = _NON_ALNUM_RE.sub("", s)
    return _SPACES_RE.sub(" ", s).strip()


class DuplicateMatcher(Protocol):
    """重複判定の差し替え境界。"""

    def is_duplicate(self, candidate: str, existing_titles: Iterable[str]) -> bool:
        """candidate が existing_titles のいずれかと同じタスクなら True。"""
        ...


class SubstringDuplicateMatcher:
    """正規化後の一致/包含で判定する（既定）。"""

    def is_duplicate(self, candidate: str, existing_titles: Iterable[str]) -> bool:
        n = normalize_title(candidate)
        if not n:
            return False
        for title in existing_titles:
            e = normalize_title(title)
            if not e:
                continue
            if e == n or e in n or n in e:
                return True
        return False


class TokenOverlapDuplicateMatcher:
    """
    単語集合の重なり率で判定する。

    重なり率 = |A ∩ B| / min(|A|, |B|)。threshold 以上なら重複とみなす。
    語順違いは重複として拾い、部分文字列の偶然一致（例: "car" と "carpet"）は重複にしない。
    """

    def __init__(self, threshold: float = 0.6) -> None:
        if not 0.0 < float(threshold) <= 1.0:
            raise ValueError("threshold must be in (0.0, 1.0]")
        self.threshold = float(threshold)

    def is_duplicate(self, candidate: str, existing_titles: Iterable[str]) -> bool:
        a = set(normalize_title(candidate).split())
        if not a:
            return False
        for title in existing_titles:
            b = set(normalize_title(title).split())
            if not b:
                continue
            ratio = len(a & b) / min(len(a), len(b))
            if ratio >= self.threshold:
                return True
        return False


def build_duplicate_matcher(strategy: str = "substring", *, threshold: float = 0.6) -> DuplicateMatcher:
    """設定名から DuplicateMatcher を作る。"""

    name = str(strategy or "substring").strip().lower()
    if name == "substring":
        return SubstringDuplicateMatcher()
    if name == "token_overlap":
        return TokenOverlapDuplicateMatcher(threshold)
    raise ValueError(f"unknown duplicate strategy: {strategy!r}")


_default_matcher = SubstringDuplicateMatcher()


def is_duplicate(candidate: str, existing_titles: Iterable[str]) -> bool:
    """既定方式（substring）で重複判定する。"""

    return _default_matcher.is_duplicate(candidate, existing_titles)
