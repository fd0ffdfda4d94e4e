"""Fee structure schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class FeeComponentSet(BaseModel):
    """One-time components plus the recurring monthly amount for one student tier."""

    model_config = ConfigDict(populate_by_name=True)

    admission: Decimal = Field(Decimal("0"), ge=0)
    uniform: Decimal = Field(Decimal("0"), ge=0)
    hostel_dress: Decimal = Field(Decimal("0"), ge=0)
    copy_: Decimal = Field(Decimal("0"), ge=0, alias="copy")
    book: Decimal = Field(Decimal("0"), ge=0)
    monthly: Decimal = Field(Decimal("0"), ge=0)


class ResolvedFeeComponents(BaseModel):
    resident: FeeComponentSet = Field(default_factory=FeeComponentSet)
    non_resident: FeeComponentSet = Field(default_factory=FeeComponentSet)

    def for_student(self, is_hosteller: bool) -> FeeComponentSet:
        return self.resident if is_hosteller else self.non_resident


class ClassFeeStructureUpsert(BaseModel):
    class_id: int
    academic_year: str = Field(..., min_length=1, max_length=20, description="e.g. 2024-25")
    resident: FeeComponentSet = Field(default_factory=FeeComponentSet, description="Hosteller fees")
    non_resident: FeeComponentSet = Field(default_factory=FeeComponentSet, description="Day scholar fees")


class ClassFeeStructureBulkUpsert(BaseModel):
    items: List[ClassFeeStructureUpsert] = Field(..., min_length=1)


class ClassFeeStructureResponse(BaseModel):
    id: int
    class_id: int
    academic_year: str
    is_active: bool
    resident: FeeComponentSet
    non_resident: FeeComponentSet
    created_at: datetime
    updated_at: datetime
