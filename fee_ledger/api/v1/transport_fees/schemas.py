"""Transport fee schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class TransportFeeCreate(BaseModel):
    student_id: int
    route_name: str = Field(..., min_length=1, max_length=100)
    monthly_amount: Decimal = Field(..., gt=0, le=Decimal("99999999.99"))
    academic_year: str = Field(..., min_length=1, max_length=20, description="e.g. 2024-25")
    start_date: date
    end_date: Optional[date] = Field(None, description="Open-ended when omitted")


class TransportFeeResponse(BaseModel):
    id: int
    student_id: int
    route_name: str
    monthly_amount: Decimal
    academic_year: str
    start_date: date
    end_date: Optional[date] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TransportFeeCreateResponse(BaseModel):
    transport_fee: TransportFeeResponse
    dues_created: int = Field(0, description="Transport dues added to the student's open account")


class TransportFeeListItem(TransportFeeResponse):
    student_name: str
    class_name: Optional[str] = None
