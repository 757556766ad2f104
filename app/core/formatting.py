"""Receipt text helpers: money, serial numbers and amounts in words (Indian numbering)."""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

CENT = Decimal("0.01")

_ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

Number = Union[Decimal, int, float, str]


def to_money(value: Optional[Number]) -> Decimal:
    """Quantize to two decimals. None and blank strings count as zero."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value).strip())
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: Optional[Number]) -> str:
    return f"{to_money(value):.2f}"


def format_serial(serial: Optional[int]) -> str:
    if serial is None:
        return "Not Assigned"
    return f"{serial:04d}"


def format_class_section(grade: Optional[str], section: Optional[str]) -> str:
    parts = []
    if grade:
        parts.append(f"Class {grade}")
    if section:
        parts.append(f"Section {section}")
    return " ".join(parts) or "—"


def format_date(value: Union[date, str]) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def _below_hundred(n: int) -> str:
    if n < 20:
        return _ONES[n]
    tens, ones = divmod(n, 10)
    return f"{_TENS[tens]} {_ONES[ones]}" if ones else _TENS[tens]


def _integer_words(n: int) -> str:
    if n == 0:
        return "Zero"
    parts = []
    crore, n = divmod(n, 10_000_000)
    if crore:
        # Anything above 99 crore is spelled out recursively ("One Hundred Crore").
        parts.append(f"{_integer_words(crore)} Crore")
    lakh, n = divmod(n, 100_000)
    if lakh:
        parts.append(f"{_below_hundred(lakh)} Lakh")
    thousand, n = divmod(n, 1000)
    if thousand:
        parts.append(f"{_below_hundred(thousand)} Thousand")
    hundred, n = divmod(n, 100)
    if hundred:
        parts.append(f"{_ONES[hundred]} Hundred")
    if n:
        parts.append(_below_hundred(n))
    return " ".join(parts)


def amount_to_indian_words(amount: Number) -> str:
    """
    Spell out a rupee amount using lakh/crore grouping.

    12345.67 -> "Rupees Twelve Thousand Three Hundred Forty Five and Sixty Seven Paise Only"
    """
    value = abs(to_money(amount))
    rupees = int(value)
    paise = int((value - rupees) * 100)
    if rupees == 0 and paise == 0:
        return "Zero Rupees Only"
    words = f"Rupees {_integer_words(rupees)}" if rupees else ""
    if paise:
        paise_words = f"{_below_hundred(paise)} Paise"
        words = f"{words} and {paise_words}" if words else paise_words
    return f"{words} Only"
