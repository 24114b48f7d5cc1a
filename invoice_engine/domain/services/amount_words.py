# invoice_engine/domain/services/amount_words.py
"""Amounts in words, Indian numbering (Thousand / Lakh / Crore)."""

from __future__ import annotations

from decimal import Decimal

from invoice_engine.domain.money import round2

_ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

# (divisor, scale word), largest first
_SCALES = ((10_000_000, "Crore"), (100_000, "Lakh"), (1_000, "Thousand"))


def _below_thousand(num: int) -> list[str]:
    words: list[str] = []
    if num >= 100:
        words += [_ONES[num // 100], "Hundred"]
        num %= 100
    if num >= 20:
        words.append(_TENS[num // 10])
        num %= 10
    if num > 0:
        words.append(_ONES[num])
    return words


def number_to_words(num: int) -> str:
    if num == 0:
        return "Zero"
    if num < 0:
        return "Minus " + number_to_words(-num)

    words: list[str] = []
    for divisor, scale in _SCALES:
        if num >= divisor:
            # crores above 999 keep stacking ("One Hundred Crore", "Ten Thousand Crore")
            words += number_to_words(num // divisor).split() + [scale]
            num %= divisor
    words += _below_thousand(num)
    return " ".join(words)


def amount_in_words(amount, currency: str = "Rupees") -> str:
    """``Decimal("1234.50")`` -> ``"One Thousand Two Hundred Thirty Four Rupees and Fifty Paise Only"``."""
    value = round2(amount)
    rupees = int(value)
    paise = int((abs(value) - abs(Decimal(rupees))) * 100)

    result = f"{number_to_words(rupees)} {currency}"
    if paise:
        result += f" and {number_to_words(paise)} Paise"
    return result + " Only"


def format_inr(amount) -> str:
    """Indian digit grouping: ``1234567.8`` -> ``"₹12,34,567.80"``."""
    value = round2(amount)
    sign = "-" if value < 0 else ""
    whole, frac = f"{abs(value):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}₹{whole}.{frac}"
