"""Receipt service: serial allocation/backfill, distribution loading and receipt printing."""

import logging
from decimal import Decimal
from typing import Mapping, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import SchoolBranding
from app.core.exceptions import NotFoundError, SerialAllocationError, ServiceError
from app.core.formatting import Number, format_serial, to_money
from app.core.models import FeeTransaction, ReceiptSerialCounter, Student

from .distribution import ReceiptDistribution
from .renderer import render_receipt
from .schemas import DistributionItem, DistributionResponse, ReceiptSerialResponse, ReceiptStudent

logger = logging.getLogger(__name__)

RECEIPT_COUNTER = "receipt"
# One retry after a conflicting concurrent assignment, then give up.
SERIAL_ALLOCATION_ATTEMPTS = 2


class _CounterMoved(Exception):
    """Counter changed between read and compare-and-swap."""


async def _get_fee_transaction(
    db: AsyncSession, fee_transaction_id: UUID, refresh: bool = False
) -> FeeTransaction:
    txn = await db.get(FeeTransaction, fee_transaction_id, populate_existing=refresh)
    if not txn:
        raise NotFoundError("Fee transaction not found")
    return txn


async def _max_assigned_serial(db: AsyncSession) -> int:
    result = await db.execute(select(func.max(FeeTransaction.receipt_serial)))
    return result.scalar() or 0


async def _read_counter(db: AsyncSession) -> Optional[int]:
    result = await db.execute(
        select(ReceiptSerialCounter.last_value).where(ReceiptSerialCounter.name == RECEIPT_COUNTER)
    )
    return result.scalar_one_or_none()


async def _align_counter(db: AsyncSession, value: int) -> None:
    """Raise the counter to at least `value` (never lowers it)."""
    current = await _read_counter(db)
    if current is None:
        db.add(ReceiptSerialCounter(name=RECEIPT_COUNTER, last_value=value))
    elif current < value:
        await db.execute(
            update(ReceiptSerialCounter)
            .where(ReceiptSerialCounter.name == RECEIPT_COUNTER)
            .values(last_value=value)
            .execution_options(synchronize_session=False)
        )


async def _next_serial_value(db: AsyncSession) -> int:
    """
    Advance the counter to max(counter, max assigned serial) + 1 and return the new value.
    Uses compare-and-swap on the observed counter value; raises _CounterMoved if it lost the race.
    """
    observed = await _read_counter(db)
    highest = max(observed or 0, await _max_assigned_serial(db))
    next_value = highest + 1
    if observed is None:
        # Concurrent first-time inserts collide on the primary key (IntegrityError).
        db.add(ReceiptSerialCounter(name=RECEIPT_COUNTER, last_value=next_value))
        await db.flush()
        return next_value
    result = await db.execute(
        update(ReceiptSerialCounter)
        .where(
            ReceiptSerialCounter.name == RECEIPT_COUNTER,
            ReceiptSerialCounter.last_value == observed,
        )
        .values(last_value=next_value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise _CounterMoved()
    return next_value


# --- Serial allocation ---
async def backfill_receipt_serials(db: AsyncSession) -> int:
    """
    Give every transaction without a serial one, ordered by payment date then id, continuing
    after the highest serial ever handed out. Returns how many rows were numbered.
    Idempotent: a second run finds nothing to number.
    """
    result = await db.execute(
        select(FeeTransaction)
        .where(FeeTransaction.receipt_serial.is_(None))
        .order_by(FeeTransaction.payment_date, FeeTransaction.id)
    )
    pending = result.scalars().all()
    # Counter included: serials of deleted transactions stay retired.
    start = max(await _read_counter(db) or 0, await _max_assigned_serial(db))
    for offset, txn in enumerate(pending, start=1):
        txn.receipt_serial = start + offset
    await _align_counter(db, start + len(pending))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError(
            "Receipt serial backfill conflicted with a concurrent assignment; run it again",
            status.HTTP_409_CONFLICT,
        )
    if pending:
        logger.info(
            "Backfilled receipt serials %d..%d for %d fee transaction(s)",
            start + 1, start + len(pending), len(pending),
        )
    return len(pending)


async def allocate_receipt_serial(db: AsyncSession, fee_transaction_id: UUID) -> int:
    """
    Return the transaction's serial, assigning the next one if it has none.
    An existing serial is returned unchanged.
    """
    txn = await _get_fee_transaction(db, fee_transaction_id)
    if txn.receipt_serial is not None:
        return txn.receipt_serial

    for attempt in range(1, SERIAL_ALLOCATION_ATTEMPTS + 1):
        try:
            serial = await _next_serial_value(db)
            txn.receipt_serial = serial
            await db.commit()
        except (IntegrityError, _CounterMoved):
            await db.rollback()
            logger.warning(
                "Receipt serial conflict for fee transaction %s (attempt %d of %d)",
                fee_transaction_id, attempt, SERIAL_ALLOCATION_ATTEMPTS,
            )
            txn = await _get_fee_transaction(db, fee_transaction_id, refresh=True)
            if txn.receipt_serial is not None:
                # Another request numbered this transaction meanwhile.
                return txn.receipt_serial
            continue
        logger.info("Assigned receipt serial %d to fee transaction %s", serial, fee_transaction_id)
        return serial

    raise SerialAllocationError("Could not assign a receipt serial; please retry printing")


async def get_receipt_serial(db: AsyncSession, fee_transaction_id: UUID) -> Optional[int]:
    txn = await _get_fee_transaction(db, fee_transaction_id)
    return txn.receipt_serial


def serial_response(fee_transaction_id: UUID, serial: Optional[int]) -> ReceiptSerialResponse:
    return ReceiptSerialResponse(
        fee_transaction_id=fee_transaction_id,
        receipt_serial=serial,
        receipt_serial_display=format_serial(serial),
    )


# --- Distribution ---
def distribution_response(fee_transaction_id: UUID, distribution: ReceiptDistribution) -> DistributionResponse:
    return DistributionResponse(
        fee_transaction_id=fee_transaction_id,
        total=distribution.total,
        items=[DistributionItem(label=label, amount=amount) for label, amount in distribution.items()],
        entered_total=distribution.entered_total,
        difference=distribution.difference,
        valid=distribution.is_valid(),
    )


async def load_distribution(
    db: AsyncSession,
    fee_transaction_id: UUID,
    amounts: Optional[Mapping[str, Number]] = None,
) -> ReceiptDistribution:
    """Distribution for the transaction's amount: the initial suggestion, or the given amounts."""
    txn = await _get_fee_transaction(db, fee_transaction_id)
    if amounts is None:
        return ReceiptDistribution.initial(txn.amount)
    return ReceiptDistribution(txn.amount, amounts)


# --- Printing ---
async def _paid_so_far(db: AsyncSession, txn: FeeTransaction) -> Decimal:
    """Student's payments up to and including this one (payment date, then id)."""
    result = await db.execute(
        select(func.coalesce(func.sum(FeeTransaction.amount), 0)).where(
            FeeTransaction.student_id == txn.student_id,
            or_(
                FeeTransaction.payment_date < txn.payment_date,
                and_(
                    FeeTransaction.payment_date == txn.payment_date,
                    FeeTransaction.id <= txn.id,
                ),
            ),
        )
    )
    return to_money(result.scalar())


async def print_receipt(
    db: AsyncSession,
    fee_transaction_id: UUID,
    amounts: Mapping[str, Number],
    branding: SchoolBranding,
    session: Optional[str] = None,
    copies: int = 1,
) -> str:
    """
    Validate the distribution, make sure the transaction has a serial, and render the receipt.
    Reprints reuse the stored serial; allocation is the only write on this path.
    """
    txn = await _get_fee_transaction(db, fee_transaction_id)
    distribution = ReceiptDistribution(txn.amount, amounts)
    distribution.validate()

    student = await db.get(Student, txn.student_id)
    if not student or not (student.name or "").strip():
        raise ServiceError("Student name is required to print a receipt", status.HTTP_400_BAD_REQUEST)
    # Snapshot before allocation: a conflicting commit expires loaded instances.
    snapshot = ReceiptStudent(
        name=student.name,
        father_name=student.father_name,
        grade=student.grade,
        section=student.section,
        admission_number=student.admission_number,
    )
    yearly_fee_amount = student.yearly_fee_amount
    payment_date = txn.payment_date
    paid_so_far = await _paid_so_far(db, txn)

    serial = txn.receipt_serial
    if serial is None:
        serial = await allocate_receipt_serial(db, fee_transaction_id)

    return render_receipt(
        branding,
        snapshot,
        payment_date,
        distribution.items(),
        serial,
        yearly_fee_amount=yearly_fee_amount,
        paid_so_far=paid_so_far,
        session=session,
        copies=copies,
    )
