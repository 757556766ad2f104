from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    FeeTransactionCreate,
    FeeTransactionDeleteResponse,
    FeeTransactionListItem,
    FeeTransactionResponse,
    StudentFeeSummary,
)
from . import service

router = APIRouter(prefix="/api/v1/fees", tags=["fees"])


# --- Payment ---
@router.get("", response_model=List[FeeTransactionListItem])
async def list_fee_transactions(
    student_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> List[FeeTransactionListItem]:
    """All payments, newest first, with student name and receipt serial."""
    return await service.list_fee_transactions(db, student_id=student_id)


@router.post("", response_model=FeeTransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_fee_transaction(
    payload: FeeTransactionCreate,
    db: AsyncSession = Depends(get_db),
) -> FeeTransactionResponse:
    try:
        return await service.create_fee_transaction(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# --- Summary ---
@router.get("/summary/{student_id}", response_model=StudentFeeSummary)
async def get_student_fee_summary(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> StudentFeeSummary:
    try:
        return await service.get_student_fee_summary(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{fee_transaction_id}", response_model=FeeTransactionResponse)
async def get_fee_transaction(
    fee_transaction_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> FeeTransactionResponse:
    obj = await service.get_fee_transaction(db, fee_transaction_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee transaction not found")
    return obj


@router.delete("/{fee_transaction_id}", response_model=FeeTransactionDeleteResponse)
async def delete_fee_transaction(
    fee_transaction_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> FeeTransactionDeleteResponse:
    deleted = await service.delete_fee_transaction(db, fee_transaction_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee transaction not found")
    return FeeTransactionDeleteResponse(deleted=fee_transaction_id)
