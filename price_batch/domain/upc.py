"""UPC canonicalization.

Upstream systems send UPC-A (12 digits with check digit) and EAN-13 codes
interchangeably. Everything downstream compares the canonical form: digits
only, check digit dropped from 12-digit codes, zero-padded to 13.
"""
from __future__ import annotations

import re

CANONICAL_WIDTH = 13
UPC_A_LENGTH = 12

_NON_DIGITS = re.compile(r"[^0-9]")


def digits_only(raw: object) -> str:
    if raw is None:
        return ""
    return _NON_DIGITS.sub("", str(raw))


def digit_count(raw: object) -> int:
    return len(digits_only(raw))


def canonicalize(raw: object) -> str:
    digits = digits_only(raw)
    if not digits:
        return ""
    if len(digits) == UPC_A_LENGTH:
        return digits[:-1].zfill(CANONICAL_WIDTH)
    # zfill never truncates, longer codes pass through unchanged
    return digits.zfill(CANONICAL_WIDTH)
