from __future__ import annotations

import logging
from typing import Iterable, List

from .utils import AnalysisReport, as_bits, bits_to_string, format_bits

logger = logging.getLogger(__name__)


def longest_palindrome(s: str) -> str:
    """
    Longest palindromic substring via Manacher's algorithm.

    The string is interleaved with '#' and fenced by '^'/'$' so odd and even
    palindromes share one radius array. Ties go to the earliest center.
    """
    if not s:
        return ""

    t = "^#" + "#".join(s) + "#$"
    n = len(t)
    p: List[int] = [0] * n
    center = right = 0

    for i in range(1, n - 1):
        mirror = 2 * center - i
        p[i] = min(right - i, p[mirror]) if right > i else 0
        while t[i + 1 + p[i]] == t[i - 1 - p[i]]:
            p[i] += 1
        if i + p[i] > right:
            center, right = i, i + p[i]

    max_len, center_idx = 0, 0
    for i in range(1, n - 1):
        if p[i] > max_len:
            max_len, center_idx = p[i], i

    start = (center_idx - max_len) // 2
    return s[start:start + max_len]


def longest_zero_run(s: str) -> int:
    best = cur = 0
    for c in s:
        if c == "0":
            cur += 1
            best = max(best, cur)
        else:
            cur = 0
    return best


def analyze(bits: "Iterable[int] | str") -> AnalysisReport:
    s = bits_to_string(as_bits(bits))
    report = AnalysisReport(
        longest_palindrome=longest_palindrome(s),
        longest_zero_run=longest_zero_run(s),
        bitstring=s,
    )
    logger.debug(
        "analyze %s: palindrome len=%d, zero run=%d",
        format_bits(s), len(report.longest_palindrome), report.longest_zero_run,
    )
    return report
