"""Account schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from fee_ledger.core.enums import AccountStatus


class AccountOpenRequest(BaseModel):
    student_id: int
    academic_year: Optional[str] = Field(None, max_length=20, description="Defaults to the current academic year")
    reopen: bool = Field(False, description="Close the open account for the year and start a fresh ledger")
    is_new_admission: Optional[bool] = Field(
        None,
        description="Seed an admission fee (true) or a registration fee (false). Inferred when omitted.",
    )


class StudentAccountResponse(BaseModel):
    id: int
    student_id: int
    ledger_number: str
    academic_year: str
    status: AccountStatus
    opened_at: datetime
    closed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AccountOpenResponse(BaseModel):
    account: StudentAccountResponse
    dues_created: int
