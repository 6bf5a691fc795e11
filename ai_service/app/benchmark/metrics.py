"""Metric utilities for Thai OCR evaluation."""

from __future__ import annotations

import math
import re
import unicodedata
from typing import Iterable, List

_CRLF_RE = re.compile(r"\r+\n")
_HORIZONTAL_WS_RE = re.compile(r"[\t ]+")
_TOKEN_SPLIT_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Normalize text before any comparison.

    NFC composition, any run of CRs before a LF to LF, runs of
    tabs/spaces to a single space, then strip. Case is kept: Thai has
    none and Latin case errors are real OCR errors.
    """

    normalized = unicodedata.normalize("NFC", text)
    normalized = _CRLF_RE.sub("\n", normalized)
    normalized = _HORIZONTAL_WS_RE.sub(" ", normalized)
    return normalized.strip()


def levenshtein_distance(source: str, target: str) -> int:
    """Edit distance over code points with unit insert/delete/substitute cost.

    Python strings index by code point, so Thai combining vowels and tone
    marks each count as one character.
    """

    m = len(source)
    n = len(target)

    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(m + 1):
        dp[i][0] = i
    for j in range(n + 1):
        dp[0][j] = j

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if source[i - 1] == target[j - 1]:
                dp[i][j] = dp[i - 1][j - 1]
            else:
                dp[i][j] = 1 + min(dp[i - 1][j], dp[i][j - 1], dp[i - 1][j - 1])

    return dp[m][n]


def character_accuracy(ground_truth: str, ocr_output: str) -> float:
    """Character accuracy in [0, 1], normalized by the longer of the two texts."""

    if not ground_truth:
        return 1.0 if not ocr_output else 0.0

    distance = levenshtein_distance(ground_truth, ocr_output)
    max_length = max(len(ground_truth), len(ocr_output))
    return max(0.0, 1.0 - distance / max_length)


def segment_words(text: str) -> List[str]:
    """Split on whitespace and drop empty tokens.

    This is a stand-in for Thai word segmentation. Thai is usually written
    without spaces between words, so a line often comes back as one token.
    """

    return [token for token in _TOKEN_SPLIT_RE.split(text) if token]


def word_accuracy(ground_truth: str, ocr_output: str) -> float:
    """Share of ground-truth tokens found anywhere in the output.

    Membership is checked against the set of output tokens, so order and
    repetition do not matter. The count is divided by the larger token
    count, which penalizes spurious extra tokens.
    """

    gt_words = segment_words(ground_truth)
    ocr_words = segment_words(ocr_output)

    if not gt_words:
        return 1.0 if not ocr_words else 0.0

    ocr_word_set = set(ocr_words)
    matches = sum(1 for word in gt_words if word in ocr_word_set)
    return matches / max(len(gt_words), len(ocr_words))


def safe_mean(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return math.nan
    return sum(values) / len(values)
