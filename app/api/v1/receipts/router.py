"""Receipts router: serial allocation, fee distribution and printable receipts."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import SchoolBranding, get_school_branding
from app.core.exceptions import InvalidDistributionError, ServiceError
from app.db.session import get_db

from .schemas import (
    AssignAllRequest,
    BackfillResponse,
    DistributionRequest,
    DistributionResponse,
    FillRemainingRequest,
    ReceiptPrintRequest,
    ReceiptSerialResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/receipts", tags=["receipts"])


# --- Serial ---
@router.post("/backfill", response_model=BackfillResponse)
async def backfill_serials(db: AsyncSession = Depends(get_db)) -> BackfillResponse:
    """Number legacy transactions that have no receipt serial yet (payment date order)."""
    try:
        assigned = await service.backfill_receipt_serials(db)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return BackfillResponse(assigned=assigned)


@router.get("/{fee_transaction_id}/serial", response_model=ReceiptSerialResponse)
async def get_serial(
    fee_transaction_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ReceiptSerialResponse:
    try:
        serial = await service.get_receipt_serial(db, fee_transaction_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return service.serial_response(fee_transaction_id, serial)


@router.post("/{fee_transaction_id}/assign-serial", response_model=ReceiptSerialResponse)
async def assign_serial(
    fee_transaction_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ReceiptSerialResponse:
    """Assign the next receipt serial; returns the existing one if already assigned."""
    try:
        serial = await service.allocate_receipt_serial(db, fee_transaction_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return service.serial_response(fee_transaction_id, serial)


# --- Distribution ---
@router.get("/{fee_transaction_id}/distribution", response_model=DistributionResponse)
async def initial_distribution(
    fee_transaction_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> DistributionResponse:
    try:
        distribution = await service.load_distribution(db, fee_transaction_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return service.distribution_response(fee_transaction_id, distribution)


@router.post("/{fee_transaction_id}/distribution/auto", response_model=DistributionResponse)
async def auto_distribution(
    fee_transaction_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> DistributionResponse:
    """Even split across teaching, exam, computer and development fees."""
    try:
        distribution = await service.load_distribution(db, fee_transaction_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    distribution.auto_distribute()
    return service.distribution_response(fee_transaction_id, distribution)


@router.post("/{fee_transaction_id}/distribution/fill", response_model=DistributionResponse)
async def fill_remaining(
    fee_transaction_id: UUID,
    payload: FillRemainingRequest,
    db: AsyncSession = Depends(get_db),
) -> DistributionResponse:
    """Put whatever is not yet allocated into one category."""
    try:
        distribution = await service.load_distribution(db, fee_transaction_id, payload.amounts)
        distribution.fill_remaining_into(payload.label)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return service.distribution_response(fee_transaction_id, distribution)


@router.post("/{fee_transaction_id}/distribution/all", response_model=DistributionResponse)
async def assign_all(
    fee_transaction_id: UUID,
    payload: AssignAllRequest,
    db: AsyncSession = Depends(get_db),
) -> DistributionResponse:
    """Whole amount under one category, e.g. all admission or all other/late fee."""
    try:
        distribution = await service.load_distribution(db, fee_transaction_id)
        distribution.assign_all_to(payload.label)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return service.distribution_response(fee_transaction_id, distribution)


@router.post("/{fee_transaction_id}/distribution/validate", response_model=DistributionResponse)
async def validate_distribution(
    fee_transaction_id: UUID,
    payload: DistributionRequest,
    db: AsyncSession = Depends(get_db),
) -> DistributionResponse:
    try:
        distribution = await service.load_distribution(db, fee_transaction_id, payload.amounts)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return service.distribution_response(fee_transaction_id, distribution)


# --- Print ---
@router.post("/{fee_transaction_id}/print", response_class=HTMLResponse)
async def print_receipt(
    fee_transaction_id: UUID,
    payload: ReceiptPrintRequest,
    db: AsyncSession = Depends(get_db),
    branding: SchoolBranding = Depends(get_school_branding),
) -> HTMLResponse:
    """
    Render the two-copy receipt. A serial is assigned on first print; reprints reuse it.
    Rejected with 422 (and the signed difference) when the amounts do not add up.
    """
    try:
        html = await service.print_receipt(
            db,
            fee_transaction_id,
            payload.amounts,
            branding,
            session=payload.session,
            copies=payload.copies,
        )
    except InvalidDistributionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail())
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return HTMLResponse(content=html)
