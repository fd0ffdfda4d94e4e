"""Finance router: student summary and dues listing."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.enums import DueStatus, DueType
from fee_ledger.core.exceptions import ServiceError
from fee_ledger.db.session import get_db

from .schemas import DueListItem, FinanceSummary
from .service import FinanceSummaryBuilder, list_dues

router = APIRouter(prefix="/api/v1/finance", tags=["finance"])


@router.get("/students/{student_id}", response_model=Optional[FinanceSummary])
async def get_student_finance(
    student_id: int,
    academic_year: Optional[str] = Query(None, description="Defaults to the current academic year"),
    db: AsyncSession = Depends(get_db),
) -> Optional[FinanceSummary]:
    """null when no account or dues exist yet for the year."""
    try:
        return await FinanceSummaryBuilder(db).summarize(student_id, academic_year)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/dues", response_model=List[DueListItem])
async def read_dues(
    academic_year: Optional[str] = None,
    status: Optional[DueStatus] = None,
    due_type: Optional[DueType] = None,
    class_id: Optional[int] = None,
    month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$", description="YYYY-MM"),
    student_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
) -> List[DueListItem]:
    return await list_dues(
        db,
        academic_year=academic_year,
        status=status,
        due_type=due_type,
        class_id=class_id,
        month=month,
        student_id=student_id,
    )
