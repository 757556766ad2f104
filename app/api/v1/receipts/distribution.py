"""
Split one payment across the fixed receipt categories before printing.

Amounts are Decimal, quantized to paise. Category order is also the printed line order.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Mapping, Optional, Tuple

from app.core.exceptions import InvalidDistributionError
from app.core.formatting import CENT, Number, to_money

CATEGORY_ORDER: Tuple[str, ...] = (
    "Admission Fee",
    "Teaching Fee",
    "Exam. Fee",
    "Computer Fee",
    "Development",
    "Other Fee/Late Fee",
)
DEFAULT_CATEGORY = "Teaching Fee"
AUTO_DISTRIBUTE_CATEGORIES: Tuple[str, ...] = (
    "Teaching Fee",
    "Exam. Fee",
    "Computer Fee",
    "Development",
)
TOLERANCE = Decimal("0.01")

ZERO = Decimal("0.00")


def _check_label(label: str) -> None:
    if label not in CATEGORY_ORDER:
        raise ValueError(f"Unknown receipt category: {label!r}")


class ReceiptDistribution:
    """Per-category allocation of a single fee transaction. Never persisted."""

    def __init__(self, total: Number, amounts: Optional[Mapping[str, Number]] = None) -> None:
        self.total = to_money(total)
        self._amounts: Dict[str, Decimal] = {label: ZERO for label in CATEGORY_ORDER}
        for label, value in (amounts or {}).items():
            self.set_amount(label, value)

    @classmethod
    def initial(cls, total: Number) -> "ReceiptDistribution":
        """Starting suggestion: the whole amount under Teaching Fee."""
        distribution = cls(total)
        if distribution.total > 0:
            distribution._amounts[DEFAULT_CATEGORY] = distribution.total
        return distribution

    def amount(self, label: str) -> Decimal:
        _check_label(label)
        return self._amounts[label]

    def set_amount(self, label: str, value: Optional[Number]) -> None:
        _check_label(label)
        try:
            amount = to_money(value)
        except ArithmeticError:
            raise ValueError(f"Invalid amount for {label}: {value!r}")
        if amount < 0:
            raise ValueError(f"Amount for {label} cannot be negative")
        self._amounts[label] = amount

    def auto_distribute(self) -> None:
        """
        Even split over AUTO_DISTRIBUTE_CATEGORIES; admission and other/late fee are zeroed.
        The last category takes the remainder so the rounded shares add up exactly.
        """
        count = len(AUTO_DISTRIBUTE_CATEGORIES)
        share = (self.total / count).quantize(CENT, rounding=ROUND_HALF_UP)
        for label in AUTO_DISTRIBUTE_CATEGORIES[:-1]:
            self._amounts[label] = share
        self._amounts[AUTO_DISTRIBUTE_CATEGORIES[-1]] = self.total - share * (count - 1)
        self._amounts["Admission Fee"] = ZERO
        self._amounts["Other Fee/Late Fee"] = ZERO

    def fill_remaining_into(self, label: str) -> Decimal:
        _check_label(label)
        already = sum((v for k, v in self._amounts.items() if k != label), ZERO)
        remaining = max(self.total - already, ZERO)
        self._amounts[label] = remaining
        return remaining

    def assign_all_to(self, label: str) -> None:
        _check_label(label)
        for key in CATEGORY_ORDER:
            self._amounts[key] = ZERO
        self._amounts[label] = self.total

    @property
    def entered_total(self) -> Decimal:
        return sum(self._amounts.values(), ZERO)

    @property
    def difference(self) -> Decimal:
        """Signed: positive when more was entered than the transaction amount."""
        return self.entered_total - self.total

    def is_valid(self) -> bool:
        return (
            self.total > 0
            and abs(self.difference) < TOLERANCE
            and any(v > 0 for v in self._amounts.values())
        )

    def validate(self) -> None:
        if not self.is_valid():
            raise InvalidDistributionError(self.total, self.entered_total, self.difference)

    def items(self) -> List[Tuple[str, Decimal]]:
        return [(label, self._amounts[label]) for label in CATEGORY_ORDER]

    def as_dict(self) -> Dict[str, Decimal]:
        return dict(self.items())
