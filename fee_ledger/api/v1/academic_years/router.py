from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.exceptions import ServiceError
from fee_ledger.db.session import get_db

from .schemas import AcademicYearCreate, AcademicYearResponse
from . import service

router = APIRouter(prefix="/api/v1/academic-years", tags=["academic-years"])


@router.post("", response_model=AcademicYearResponse, status_code=status.HTTP_201_CREATED)
async def create_academic_year(
    payload: AcademicYearCreate,
    db: AsyncSession = Depends(get_db),
) -> AcademicYearResponse:
    """Create academic year. Use is_current=true to make it the current year."""
    try:
        return await service.create_academic_year(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[AcademicYearResponse])
async def list_academic_years(db: AsyncSession = Depends(get_db)) -> List[AcademicYearResponse]:
    return await service.list_academic_years(db)


@router.get("/current", response_model=Optional[AcademicYearResponse])
async def get_current_academic_year(db: AsyncSession = Depends(get_db)) -> Optional[AcademicYearResponse]:
    return await service.get_current_academic_year(db)


@router.post("/{code}/set-current", response_model=AcademicYearResponse)
async def set_academic_year_current(
    code: str,
    db: AsyncSession = Depends(get_db),
) -> AcademicYearResponse:
    """Set this academic year as current. All others become non-current."""
    try:
        return await service.set_academic_year_current(db, code)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
