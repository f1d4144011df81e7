from __future__ import annotations

import re

UNKNOWN_YEAR = "Unknown"
_LEADING_DIGITS = re.compile(r"\d+")


def normalize_year(value: object) -> str:
    """Render a tag year as a decimal string, or ``"Unknown"``.

    Only positive integers qualify. Date strings contribute their leading
    digits, so ``"2023-05-01"`` becomes ``"2023"``.
    """
    if value is None or isinstance(value, bool):
        return UNKNOWN_YEAR
    if isinstance(value, (int, float)):
        return _format_year(int(value))
    text = str(value).strip()
    match = _LEADING_DIGITS.match(text)
    if not match:
        return UNKNOWN_YEAR
    return _format_year(int(match.group(0)))


def _format_year(year: int) -> str:
    if year > 0:
        return str(year)
    return UNKNOWN_YEAR
