from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class AcademicYearCreate(BaseModel):
    """Create academic year. code and name must be unique."""

    code: str = Field(..., min_length=1, max_length=20, description="e.g. 2024-25")
    name: Optional[str] = Field(None, max_length=80, description="Defaults to 'Academic Year <code>'")
    start_date: Optional[date] = Field(None, description="Defaults to the first day of the start month")
    end_date: Optional[date] = Field(None, description="Defaults to the day before the next start month")
    is_current: bool = Field(False, description="If true, all other years become non-current")


class AcademicYearResponse(BaseModel):
    code: str
    name: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool
    is_current: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
