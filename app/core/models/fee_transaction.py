"""Fee transaction: one payment by a student, optionally carrying its printed receipt serial."""

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.db.session import Base


class FeeTransaction(Base):
    """
    receipt_serial is NULL until the first print (or the legacy backfill).
    Once set it never changes and is never handed to another row.
    """

    __tablename__ = "fee_transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="fee_amount_positive"),
        CheckConstraint(
            "payment_mode IN ('cash','card','upi','cheque','bank-transfer','other')",
            name="fee_payment_mode_allowed",
        ),
        Index("idx_fee_transactions_student_date", "student_id", "payment_date"),
        Index("fee_transactions_receipt_serial_unique", "receipt_serial", unique=True),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    transaction_id = Column(String(30), nullable=False, unique=True)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_date = Column(Date, nullable=False)
    payment_mode = Column(String(20), nullable=False, default="cash")
    remarks = Column(Text, nullable=True)
    receipt_serial = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("Student")
