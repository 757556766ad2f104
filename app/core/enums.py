from enum import Enum


class PaymentMode(str, Enum):
    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    CHEQUE = "cheque"
    BANK_TRANSFER = "bank-transfer"
    OTHER = "other"


class StudentStatus(str, Enum):
    ACTIVE = "active"
    LEFT = "left"


class ImportStrategy(str, Enum):
    """What a bulk import does with an admission number that already exists."""

    SKIP = "skip"
    UPSERT = "upsert"
