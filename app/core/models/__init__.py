from app.core.models.student import Student
from app.core.models.fee_transaction import FeeTransaction
from app.core.models.receipt_serial_counter import ReceiptSerialCounter
from app.core.models.grade import Grade
from app.core.models.subject import Subject
from app.core.models.class_subject import ClassSubject

__all__ = [
    "Student",
    "FeeTransaction",
    "ReceiptSerialCounter",
    "Grade",
    "Subject",
    "ClassSubject",
]
