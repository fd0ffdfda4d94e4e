"""Fee structure router: upsert, bulk upsert, list, resolve."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.exceptions import ServiceError
from fee_ledger.db.session import get_db

from .resolver import FeeComponentResolver
from .schemas import (
    ClassFeeStructureBulkUpsert,
    ClassFeeStructureResponse,
    ClassFeeStructureUpsert,
    ResolvedFeeComponents,
)
from . import service

router = APIRouter(prefix="/api/v1/fee-structures", tags=["fee-structures"])


@router.put("", response_model=ClassFeeStructureResponse)
async def upsert_class_fee_structure(
    payload: ClassFeeStructureUpsert,
    db: AsyncSession = Depends(get_db),
) -> ClassFeeStructureResponse:
    try:
        return await service.upsert_class_fee_structure(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/bulk-upsert", response_model=List[ClassFeeStructureResponse])
async def bulk_upsert_class_fee_structures(
    payload: ClassFeeStructureBulkUpsert,
    db: AsyncSession = Depends(get_db),
) -> List[ClassFeeStructureResponse]:
    try:
        return await service.bulk_upsert_class_fee_structures(db, payload.items)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[ClassFeeStructureResponse])
async def list_class_fee_structures(
    academic_year: str,
    active_only: bool = Query(True, description="Return only active structures by default"),
    db: AsyncSession = Depends(get_db),
) -> List[ClassFeeStructureResponse]:
    return await service.list_class_fee_structures(db, academic_year, active_only=active_only)


@router.get("/resolve", response_model=ResolvedFeeComponents)
async def resolve_fee_components(
    class_id: int,
    academic_year: str,
    db: AsyncSession = Depends(get_db),
) -> ResolvedFeeComponents:
    """Components a class owes for a year; falls back to the latest active structure for the class."""
    return await FeeComponentResolver(db).resolve(class_id, academic_year)
