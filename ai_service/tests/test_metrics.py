"""Tests for text normalization and accuracy metrics."""

import math
import unicodedata

import pytest

from app.benchmark.metrics import (
    character_accuracy,
    levenshtein_distance,
    normalize_text,
    safe_mean,
    segment_words,
    word_accuracy,
)


class TestNormalizeText:
    def test_collapses_horizontal_whitespace_and_crlf(self):
        assert normalize_text("  สวัสดี\t\t ครับ\r\nบรรทัด  ") == "สวัสดี ครับ\nบรรทัด"

    def test_repeated_carriage_returns_before_newline(self):
        assert normalize_text("a\r\r\nb") == "a\nb"
        assert normalize_text("ภาษา\r\r\r\nไทย") == "ภาษา\nไทย"

    def test_keeps_single_newlines(self):
        assert normalize_text("a\nb\n\nc") == "a\nb\n\nc"

    def test_composes_unicode(self):
        decomposed = unicodedata.normalize("NFD", "é")
        assert normalize_text(decomposed) == "é"
        assert len(normalize_text(decomposed)) == 1

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "   ",
            " ก ข\r\n ค\t",
            "a\r\r\nb",
            "ก\r\r\r\n\t\r\nข",
            "ภาษาไทย  \r\n\r\n x ",
            unicodedata.normalize("NFD", "café  au\tlait"),
        ],
    )
    def test_idempotent(self, text):
        once = normalize_text(text)
        assert normalize_text(once) == once


class TestLevenshtein:
    @pytest.mark.parametrize("text", ["", "abc", "สวัสดี", "ภาษาไทย 123"])
    def test_identity_is_zero(self, text):
        assert levenshtein_distance(text, text) == 0

    @pytest.mark.parametrize("text", ["a", "abc", "สวัสดี"])
    def test_empty_source_costs_length(self, text):
        assert levenshtein_distance("", text) == len(text)
        assert levenshtein_distance(text, "") == len(text)

    def test_single_substitution(self):
        assert levenshtein_distance("abc", "abd") == 1

    def test_thai_counts_code_points(self):
        # ี (U+0E35) vs า (U+0E32) is one code point, several UTF-8 bytes
        assert levenshtein_distance("สวัสดี", "สวัสดา") == 1

    def test_classic_example(self):
        assert levenshtein_distance("kitten", "sitting") == 3

    @pytest.mark.parametrize(
        "a, b",
        [("kitten", "sitting"), ("", "abc"), ("ภาษาไทย", "ภาษาลาว"), ("abc", "cba")],
    )
    def test_symmetric_and_bounded(self, a, b):
        distance = levenshtein_distance(a, b)
        assert distance == levenshtein_distance(b, a)
        assert 0 <= distance <= max(len(a), len(b))


class TestCharacterAccuracy:
    def test_exact_match(self):
        assert character_accuracy("สวัสดี", "สวัสดี") == 1

    def test_one_character_difference(self):
        accuracy = character_accuracy("สวัสดี", "สวัสดา")
        assert 0.8 < accuracy < 1

    def test_empty_cases(self):
        assert character_accuracy("", "") == 1
        assert character_accuracy("", "x") == 0
        assert character_accuracy("x", "") == 0
        assert character_accuracy("สวัสดี", "") == 0

    def test_normalized_by_longer_text(self):
        # 1 - 6 / 9: distance is the 6 extra characters
        assert character_accuracy("abc", "abcxxxxxx") == pytest.approx(1 - 6 / 9)

    def test_never_negative(self):
        assert character_accuracy("abc", "xyz") == 0


class TestWordAccuracy:
    def test_segment_words_drops_empty_tokens(self):
        assert segment_words("  ก  ข\n\nค\t") == ["ก", "ข", "ค"]
        assert segment_words("") == []

    def test_order_does_not_matter(self):
        assert word_accuracy("สวัสดี ครับ ทุกคน", "ทุกคน\nสวัสดี ครับ") == 1.0

    def test_partial_match(self):
        assert word_accuracy("a b c d", "a b x y") == pytest.approx(0.5)

    def test_extra_output_tokens_penalize(self):
        assert word_accuracy("a b", "a b c d") == pytest.approx(0.5)

    def test_empty_cases(self):
        assert word_accuracy("", "") == 1
        assert word_accuracy("   ", "") == 1
        assert word_accuracy("", "a") == 0
        assert word_accuracy("a", "") == 0

    def test_unspaced_thai_is_one_token(self):
        # No spaces between Thai words, so one wrong character loses the whole line
        assert word_accuracy("ภาษาไทยง่ายนิดเดียว", "ภาษาไทยง่ายนิดเดียา") == 0


def test_safe_mean():
    assert safe_mean([0.9, 0.8]) == pytest.approx(0.85)
    assert math.isnan(safe_mean([]))
