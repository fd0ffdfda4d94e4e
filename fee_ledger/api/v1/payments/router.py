"""Payments router: record, verify, history, receipt."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.exceptions import ServiceError
from fee_ledger.db.session import get_db

from .schemas import (
    PaymentReceipt,
    PaymentRecordRequest,
    PaymentRecordResponse,
    PaymentResponse,
    PaymentVerifyRequest,
)
from . import service

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.post("/record", response_model=PaymentRecordResponse, status_code=status.HTTP_201_CREATED)
async def record_payment(
    payload: PaymentRecordRequest,
    db: AsyncSession = Depends(get_db),
) -> PaymentRecordResponse:
    try:
        return await service.PaymentRecorder(db).record(payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/{payment_id}/verify", response_model=PaymentResponse)
async def verify_payment(
    payment_id: int,
    payload: PaymentVerifyRequest,
    db: AsyncSession = Depends(get_db),
) -> PaymentResponse:
    try:
        return await service.verify_payment(db, payment_id, payload.verified_by)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[PaymentResponse])
async def read_payments(
    student_id: Optional[int] = None,
    academic_year: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
) -> List[PaymentResponse]:
    return await service.list_payments(db, student_id=student_id, academic_year=academic_year, limit=limit)


@router.get("/{payment_id}/receipt", response_model=PaymentReceipt)
async def read_receipt(
    payment_id: int,
    db: AsyncSession = Depends(get_db),
) -> PaymentReceipt:
    try:
        return await service.get_receipt(db, payment_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
