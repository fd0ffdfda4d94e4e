"""Payment schemas: record request, payment/allocation responses, receipt."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from fee_ledger.api.v1.finance.schemas import FinanceSummary, StudentIdentity
from fee_ledger.core.enums import PaymentMethod, PaymentStatus


class AllocationIn(BaseModel):
    due_id: Optional[int] = Field(None, description="Omit to record a miscellaneous charge")
    amount: Decimal
    label: Optional[str] = Field(None, max_length=120)
    category: Optional[str] = Field(None, max_length=60)
    notes: Optional[str] = None


class PaymentRecordRequest(BaseModel):
    student_id: int
    payment_date: str = Field(..., description="ISO date or datetime, e.g. 2024-04-10")
    payment_method: PaymentMethod
    reference_number: Optional[str] = Field(None, max_length=100)
    remarks: Optional[str] = None
    allocations: List[AllocationIn] = Field(default_factory=list)
    academic_year: Optional[str] = Field(None, max_length=20, description="Defaults to the current academic year")
    created_by: Optional[int] = None
    verify: bool = False


class PaymentVerifyRequest(BaseModel):
    verified_by: Optional[int] = None


class PaymentResponse(BaseModel):
    id: int
    student_id: int
    account_id: Optional[int] = None
    academic_year: Optional[str] = None
    amount: Decimal
    payment_method: PaymentMethod
    reference_number: Optional[str] = None
    payment_date: datetime
    status: PaymentStatus
    verified_by: Optional[int] = None
    verified_at: Optional[datetime] = None
    remarks: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AllocationResponse(BaseModel):
    id: int
    payment_id: int
    due_id: Optional[int] = None
    label: Optional[str] = None
    category: Optional[str] = None
    amount: Decimal
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class PaymentRecordResponse(BaseModel):
    payment: PaymentResponse
    allocations: List[AllocationResponse]
    summary: Optional[FinanceSummary] = None


class PaymentReceipt(BaseModel):
    payment: PaymentResponse
    allocations: List[AllocationResponse]
    student: StudentIdentity
    ledger_number: Optional[str] = None
