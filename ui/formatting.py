"""
Display formatting for budget figures and audience sizes.
"""

import math
from typing import Optional, Union

from config.settings import config_manager

PLACEHOLDER = "..."

Number = Union[int, float]


def _indian_grouping(whole: int) -> str:
    """Group digits the en-IN way: last three, then pairs (12,34,567)."""
    digits = str(abs(whole))
    if len(digits) <= 3:
        grouped = digits
    else:
        head, tail = digits[:-3], digits[-3:]
        pairs = []
        while len(head) > 2:
            pairs.insert(0, head[-2:])
            head = head[:-2]
        if head:
            pairs.insert(0, head)
        grouped = ",".join(pairs + [tail])
    return f"-{grouped}" if whole < 0 else grouped


def format_currency(value: Optional[Number], symbol: Optional[str] = None) -> str:
    """Whole-rupee amount with Indian digit grouping, or the placeholder when missing."""
    if value is None:
        return PLACEHOLDER
    symbol = symbol if symbol is not None else config_manager.load_config().currency_symbol
    return f"{symbol}{_indian_grouping(int(round(value)))}"


def format_cpr(value: Optional[Number], symbol: Optional[str] = None) -> str:
    """Cost per result with two decimal places."""
    if value is None:
        return PLACEHOLDER
    symbol = symbol if symbol is not None else config_manager.load_config().currency_symbol
    whole = int(math.floor(abs(value)))
    cents = int(round((abs(value) - whole) * 100))
    if cents == 100:
        whole, cents = whole + 1, 0
    sign = "-" if value < 0 else ""
    return f"{symbol}{sign}{_indian_grouping(whole)}.{cents:02d}"


def format_number(value: Optional[Number]) -> str:
    if value is None:
        return PLACEHOLDER
    return _indian_grouping(int(value))


def format_audience_size(size: Optional[Number]) -> str:
    """Abbreviate audience sizes: 1.5K, 2.3M, 1.1B."""
    if size is None:
        return "N/A"
    if size >= 1_000_000_000:
        return f"{size / 1_000_000_000:.1f}B"
    if size >= 1_000_000:
        return f"{size / 1_000_000:.1f}M"
    if size >= 1_000:
        return f"{size / 1_000:.1f}K"
    return str(int(size))
