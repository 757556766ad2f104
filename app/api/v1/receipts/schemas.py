"""Receipt schemas: serial allocation, distribution and print requests."""

from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ReceiptStudent(BaseModel):
    """Read-only student snapshot printed on a receipt."""

    name: str
    father_name: Optional[str] = None
    grade: Optional[str] = None
    section: Optional[str] = None
    admission_number: Optional[str] = None


# --- Serial ---
class ReceiptSerialResponse(BaseModel):
    fee_transaction_id: UUID
    receipt_serial: Optional[int] = None
    receipt_serial_display: str


class BackfillResponse(BaseModel):
    assigned: int


# --- Distribution ---
class DistributionItem(BaseModel):
    label: str
    amount: Decimal


class DistributionResponse(BaseModel):
    fee_transaction_id: UUID
    total: Decimal
    items: List[DistributionItem]
    entered_total: Decimal
    difference: Decimal
    valid: bool


class DistributionRequest(BaseModel):
    amounts: Dict[str, Decimal] = Field(
        default_factory=dict,
        description="Category label -> amount. Missing categories count as zero.",
    )


class FillRemainingRequest(DistributionRequest):
    label: str = Field(..., description="Category that receives the unallocated remainder")


class AssignAllRequest(BaseModel):
    label: str = Field(..., description="Category that receives the whole amount")


# --- Print ---
class ReceiptPrintRequest(DistributionRequest):
    session: Optional[str] = Field(None, description="Overrides the configured academic session")
    copies: int = Field(1, ge=1, le=10, description="Physical pages; each holds Student and Office copies")
