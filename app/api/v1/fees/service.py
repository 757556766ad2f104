"""Fees service: recording payments, listing them and per-student balance."""

import logging
import secrets
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.core.formatting import format_serial, to_money
from app.core.models import FeeTransaction, Student

from .schemas import (
    FeeTransactionCreate,
    FeeTransactionListItem,
    FeeTransactionResponse,
    StudentFeeSummary,
)

logger = logging.getLogger(__name__)


def generate_transaction_code() -> str:
    """TXN followed by 10 uppercase hex characters."""
    return "TXN" + secrets.token_hex(5).upper()


def _to_response(txn: FeeTransaction) -> FeeTransactionResponse:
    return FeeTransactionResponse.model_validate(txn)


async def list_fee_transactions(
    db: AsyncSession,
    student_id: Optional[UUID] = None,
) -> List[FeeTransactionListItem]:
    """Newest payment first (ties: newest record first)."""
    stmt = (
        select(FeeTransaction, Student.name, Student.admission_number)
        .join(Student, FeeTransaction.student_id == Student.id)
    )
    if student_id is not None:
        stmt = stmt.where(FeeTransaction.student_id == student_id)
    stmt = stmt.order_by(FeeTransaction.payment_date.desc(), FeeTransaction.created_at.desc())
    result = await db.execute(stmt)
    items = []
    for txn, student_name, admission_number in result.all():
        items.append(
            FeeTransactionListItem(
                **_to_response(txn).model_dump(),
                student_name=student_name,
                admission_number=admission_number,
                receipt_serial_display=format_serial(txn.receipt_serial),
            )
        )
    return items


async def get_fee_transaction(db: AsyncSession, fee_transaction_id: UUID) -> Optional[FeeTransactionResponse]:
    txn = await db.get(FeeTransaction, fee_transaction_id)
    return _to_response(txn) if txn else None


async def create_fee_transaction(db: AsyncSession, payload: FeeTransactionCreate) -> FeeTransactionResponse:
    """Record a payment. The receipt serial stays empty until the receipt is first printed."""
    student = await db.get(Student, payload.student_id)
    if not student:
        raise NotFoundError("Student not found")
    txn = FeeTransaction(
        student_id=payload.student_id,
        transaction_id=generate_transaction_code(),
        amount=to_money(payload.amount),
        payment_date=payload.payment_date,
        payment_mode=payload.payment_mode.value,
        remarks=(payload.remarks or "").strip() or None,
    )
    db.add(txn)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Could not record payment: duplicate transaction code, please retry")
    await db.refresh(txn)
    logger.info(
        "Recorded fee transaction %s (%s) for student %s",
        txn.transaction_id, txn.amount, student.admission_number,
    )
    return _to_response(txn)


async def delete_fee_transaction(db: AsyncSession, fee_transaction_id: UUID) -> bool:
    txn = await db.get(FeeTransaction, fee_transaction_id)
    if not txn:
        return False
    if txn.receipt_serial is not None:
        # The serial is retired with the row; it is never reissued.
        logger.info(
            "Deleting fee transaction %s with receipt serial %s",
            txn.transaction_id, format_serial(txn.receipt_serial),
        )
    await db.delete(txn)
    await db.commit()
    return True


# --- Summary ---
async def get_student_fee_summary(db: AsyncSession, student_id: UUID) -> StudentFeeSummary:
    student = await db.get(Student, student_id)
    if not student:
        raise NotFoundError("Student not found")
    total_paid, count = (
        await db.execute(
            select(
                func.coalesce(func.sum(FeeTransaction.amount), 0),
                func.count(FeeTransaction.id),
            ).where(FeeTransaction.student_id == student_id)
        )
    ).one()
    yearly = to_money(student.yearly_fee_amount)
    paid = to_money(total_paid)
    return StudentFeeSummary(
        student_id=student_id,
        yearly_fee_amount=yearly,
        total_paid=paid,
        balance=yearly - paid,
        transaction_count=count,
    )
