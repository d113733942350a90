from __future__ import annotations

import pytest

from nudge.reminders.dedup import (
    SubstringDuplicateMatcher,
    TokenOverlapDuplicateMatcher,
    build_duplicate_matcher,
    is_duplicate,
    normalize_title,
)


def test_normalize_title():
    assert normalize_title("  Get an OIL-change!!  ") == "get an oilchange"
    assert normalize_title("Schedule   dentist\tvisit") == "schedule dentist visit"
    assert normalize_title(None) == ""


def test_substring_matches_either_direction():
    assert is_duplicate("Oil change", ["Get oil change soon"])
    assert is_duplicate("Schedule annual physical exam", ["annual physical"])
    assert is_duplicate("Renew Car Registration", ["renew car registration."])


def test_unrelated_titles_are_not_duplicates():
    assert not is_duplicate("Schedule dentist cleaning", ["Get oil change"])
    assert not is_duplicate("Anything", [])


def test_empty_titles_never_match():
    m = SubstringDuplicateMatcher()
    assert not m.is_duplicate("!!!", ["Get oil change"])
    assert not m.is_duplicate("Get oil change", ["", "???"])


def test_token_overlap_ignores_word_order():
    m = TokenOverlapDuplicateMatcher(0.6)
    assert m.is_duplicate("physical annual schedule", ["Schedule annual physical"])
    assert not m.is_duplicate("Clean carpet", ["Service car"])


def test_token_overlap_rejects_bad_threshold():
    with pytest.raises(ValueError):
        TokenOverlapDuplicateMatcher(0.0)


def test_build_duplicate_matcher():
    assert isinstance(build_duplicate_matcher("substring"), SubstringDuplicateMatcher)
    m = build_duplicate_matcher("token_overlap", threshold=0.75)
    assert isinstance(m, TokenOverlapDuplicateMatcher)
    assert m.threshold == 0.75
    with pytest.raises(ValueError):
        build_duplicate_matcher("levenshtein")
