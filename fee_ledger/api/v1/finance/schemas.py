"""Finance schemas: per-student summary and the dues listing."""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from fee_ledger.core.enums import AccountStatus, DueStatus, DueType, ItemType


class StudentIdentity(BaseModel):
    id: int
    name: str
    admission_number: Optional[str] = None
    class_id: Optional[int] = None
    class_name: Optional[str] = None
    section: Optional[str] = None
    is_hosteller: bool = False
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None


class AccountRef(BaseModel):
    id: int
    ledger_number: str
    academic_year: str
    status: AccountStatus

    class Config:
        from_attributes = True


class DueItem(BaseModel):
    id: int
    due_type: DueType
    item_type: ItemType
    label: str
    due_month: Optional[str] = None
    amount: Decimal
    paid_amount: Decimal
    balance: Decimal
    status: DueStatus
    notes: Optional[str] = None


class FinanceTotals(BaseModel):
    outstanding: Decimal = Decimal("0")
    fully_paid: Decimal = Decimal("0")
    partial_count: int = 0
    due_count: int = 0


class FinanceBuckets(BaseModel):
    one_time: List[DueItem] = Field(default_factory=list)
    monthly: List[DueItem] = Field(default_factory=list)
    misc: List[DueItem] = Field(default_factory=list)


class FinanceSummary(BaseModel):
    student: StudentIdentity
    academic_year: str
    account: Optional[AccountRef] = None
    totals: FinanceTotals
    buckets: FinanceBuckets


class DueListItem(DueItem):
    student_id: int
    student_name: str
    academic_year: str
    class_id: Optional[int] = None
    class_name: Optional[str] = None
    ledger_number: Optional[str] = None
