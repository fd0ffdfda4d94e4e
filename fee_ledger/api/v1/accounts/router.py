"""Accounts router: open (or reuse) a ledger account, read the latest account for a year."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.exceptions import ServiceError
from fee_ledger.db.session import get_db

from .schemas import AccountOpenRequest, AccountOpenResponse, StudentAccountResponse
from .service import AccountManager

router = APIRouter(prefix="/api/v1/accounts", tags=["accounts"])


@router.post("/open", response_model=AccountOpenResponse, status_code=status.HTTP_201_CREATED)
async def open_account(
    payload: AccountOpenRequest,
    db: AsyncSession = Depends(get_db),
) -> AccountOpenResponse:
    try:
        account, dues_created = await AccountManager(db).open_account(
            payload.student_id,
            academic_year=payload.academic_year,
            reopen=payload.reopen,
            is_new_admission=payload.is_new_admission,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return AccountOpenResponse(
        account=StudentAccountResponse.model_validate(account),
        dues_created=dues_created,
    )


@router.get("/{student_id}", response_model=StudentAccountResponse)
async def get_account(
    student_id: int,
    academic_year: Optional[str] = Query(None, description="Defaults to the current academic year"),
    db: AsyncSession = Depends(get_db),
) -> StudentAccountResponse:
    try:
        return await AccountManager(db).get_account(student_id, academic_year)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
