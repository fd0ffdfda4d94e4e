"""Transport fee router: register a student on a route, list active registrations."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.academic_calendar import AcademicYearCalendar
from fee_ledger.core.exceptions import ServiceError
from fee_ledger.db.session import get_db

from .schemas import TransportFeeCreate, TransportFeeCreateResponse, TransportFeeListItem
from . import service

router = APIRouter(prefix="/api/v1/transport-fees", tags=["transport-fees"])


@router.post("", response_model=TransportFeeCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_transport_fee(
    payload: TransportFeeCreate,
    db: AsyncSession = Depends(get_db),
) -> TransportFeeCreateResponse:
    try:
        return await service.create_transport_fee(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[TransportFeeListItem])
async def list_transport_fees(
    academic_year: Optional[str] = Query(None, description="All years when omitted"),
    db: AsyncSession = Depends(get_db),
) -> List[TransportFeeListItem]:
    if academic_year and not AcademicYearCalendar().is_valid(academic_year):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid academic year '{academic_year}'")
    return await service.list_transport_fees(db, academic_year)
