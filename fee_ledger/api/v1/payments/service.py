"""
Payment service: record a payment split across dues, verify it, list history, build receipts.

record() validates the payload, finds the student's account for the payment year (opening
one only when the year has none), then applies the whole payment in one transaction. Dues it touches are locked and re-read
first, so two payments racing for the same due validate against the committed balance.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.api.v1.accounts.service import AccountManager
from fee_ledger.api.v1.finance.service import FinanceSummaryBuilder
from fee_ledger.core.academic_calendar import AcademicYearCalendar
from fee_ledger.core.config import settings
from fee_ledger.core.enums import DueType, ItemType, PaymentStatus
from fee_ledger.core.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from fee_ledger.core.labels import ITEM_LABELS, due_label
from fee_ledger.core.models import Payment, PaymentAllocation, StudentAccount, StudentDue
from fee_ledger.core.money import MAX_AMOUNT, ZERO, due_status, outstanding, round_amount, to_decimal
from fee_ledger.core.roster import RosterProvider, SqlRosterProvider

from .schemas import (
    AllocationIn,
    AllocationResponse,
    PaymentReceipt,
    PaymentRecordRequest,
    PaymentRecordResponse,
    PaymentResponse,
)

logger = logging.getLogger(__name__)


def parse_payment_date(value) -> datetime:
    """ISO date or datetime; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError:
            raise ValidationError(f"Invalid payment date '{value}'")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _clean(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


class PaymentRecorder:
    def __init__(
        self,
        db: AsyncSession,
        roster: Optional[RosterProvider] = None,
        calendar: Optional[AcademicYearCalendar] = None,
        epsilon: Optional[Decimal] = None,
    ) -> None:
        self.db = db
        self.roster = roster or SqlRosterProvider(db)
        self.calendar = calendar or AcademicYearCalendar()
        self.epsilon = settings.amount_epsilon if epsilon is None else epsilon
        self.accounts = AccountManager(db, roster=self.roster, calendar=self.calendar)
        self.summaries = FinanceSummaryBuilder(db, roster=self.roster, calendar=self.calendar)

    def validate_allocations(self, allocations: List[AllocationIn]) -> List[Tuple[AllocationIn, Decimal]]:
        if not allocations:
            raise ValidationError("Payment needs at least one allocation")
        rounded = []
        for alloc in allocations:
            amount = round_amount(alloc.amount)
            if amount <= 0:
                target = f"due {alloc.due_id}" if alloc.due_id is not None else "miscellaneous charge"
                raise ValidationError(f"Allocation for {target} must be a positive amount")
            if amount > MAX_AMOUNT:
                target = f"due {alloc.due_id}" if alloc.due_id is not None else "miscellaneous charge"
                raise ValidationError(f"Allocation for {target} exceeds the maximum amount of {MAX_AMOUNT}")
            rounded.append((alloc, amount))
        if sum(amount for _, amount in rounded) <= 0:
            raise ValidationError("Payment total must be positive")
        if sum(amount for _, amount in rounded) > MAX_AMOUNT:
            raise ValidationError(f"Payment total exceeds the maximum amount of {MAX_AMOUNT}")
        return rounded

    async def _lock_dues(self, due_ids: List[int]) -> Dict[int, StudentDue]:
        if not due_ids:
            return {}
        result = await self.db.execute(
            select(StudentDue)
            .where(StudentDue.id.in_(due_ids))
            .order_by(StudentDue.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return {due.id: due for due in result.scalars().all()}

    def _check_due_allocations(
        self,
        student_id: int,
        academic_year: str,
        allocations: List[Tuple[AllocationIn, Decimal]],
        dues: Dict[int, StudentDue],
    ) -> None:
        remaining: Dict[int, Decimal] = {}
        for alloc, amount in allocations:
            if alloc.due_id is None:
                continue
            due = dues.get(alloc.due_id)
            if due is None:
                raise NotFoundError(f"Due {alloc.due_id} not found")
            if due.student_id != student_id:
                raise ConflictError(f"Due {due.id} does not belong to student {student_id}")
            if due.academic_year != academic_year:
                raise ConflictError(
                    f"Due {due.id} belongs to academic year {due.academic_year}, not {academic_year}"
                )
            balance = remaining.get(due.id, outstanding(due.amount, due.paid_amount))
            if amount > balance + self.epsilon:
                raise ConflictError(
                    f"Allocation for due {due.id} exceeds outstanding balance of {round_amount(balance)}"
                )
            remaining[due.id] = balance - amount

    async def _apply(
        self,
        payload: PaymentRecordRequest,
        allocations: List[Tuple[AllocationIn, Decimal]],
        account: StudentAccount,
        payment_date: datetime,
    ) -> Tuple[Payment, List[PaymentAllocation]]:
        dues = await self._lock_dues(sorted({a.due_id for a, _ in allocations if a.due_id is not None}))
        self._check_due_allocations(payload.student_id, account.academic_year, allocations, dues)

        now = datetime.now(timezone.utc)
        payment = Payment(
            student_id=payload.student_id,
            account_id=account.id,
            academic_year=account.academic_year,
            amount=sum((amount for _, amount in allocations), ZERO),
            payment_method=payload.payment_method.value,
            reference_number=_clean(payload.reference_number),
            payment_date=payment_date,
            status=(PaymentStatus.paid if payload.verify else PaymentStatus.pending).value,
            verified_by=payload.created_by if payload.verify else None,
            verified_at=now if payload.verify else None,
            remarks=_clean(payload.remarks),
            created_by=payload.created_by,
        )
        self.db.add(payment)
        await self.db.flush()

        rows = []
        for alloc, amount in allocations:
            if alloc.due_id is not None:
                due = dues[alloc.due_id]
                due.paid_amount = round_amount(to_decimal(due.paid_amount) + amount)
                due.status = due_status(due.amount, due.paid_amount, self.epsilon).value
                due.updated_at = now
            else:
                notes = _clean(alloc.label) or _clean(alloc.category) or ITEM_LABELS[ItemType.misc]
                paid = amount if payload.verify else ZERO
                due = StudentDue(
                    student_id=payload.student_id,
                    account_id=account.id,
                    due_type=DueType.one_time.value,
                    item_type=ItemType.misc.value,
                    academic_year=account.academic_year,
                    amount=amount,
                    paid_amount=paid,
                    status=due_status(amount, paid, self.epsilon).value,
                    notes=notes,
                )
                self.db.add(due)
                await self.db.flush()
            rows.append(
                PaymentAllocation(
                    payment_id=payment.id,
                    due_id=due.id,
                    label=_clean(alloc.label) or due_label(due.item_type, due.due_month, due.notes),
                    category=_clean(alloc.category) or due.item_type,
                    amount=amount,
                    notes=_clean(alloc.notes),
                )
            )
        self.db.add_all(rows)
        await self.db.flush()
        return payment, rows

    async def payment_year(
        self,
        payload: PaymentRecordRequest,
        allocations: List[Tuple[AllocationIn, Decimal]],
    ) -> str:
        """Explicit year; else the one year all targeted dues belong to; else the current year."""
        if (payload.academic_year or "").strip():
            return self.accounts.resolve_year(payload.academic_year)
        due_ids = {alloc.due_id for alloc, _ in allocations if alloc.due_id is not None}
        if due_ids:
            years = (
                await self.db.execute(
                    select(StudentDue.academic_year).where(StudentDue.id.in_(due_ids)).distinct()
                )
            ).scalars().all()
            if len(years) > 1:
                raise ValidationError("Allocations target dues from more than one academic year")
            if years:
                return years[0]
        return self.accounts.resolve_year(None)

    async def ledger_account(self, student_id: int, academic_year: str) -> StudentAccount:
        """
        The student's latest account for the year, open or closed. Only when the year has no
        account at all is one opened, and that never closes another year's account.
        """
        account = await self.accounts.latest_account(student_id, academic_year)
        if account is not None:
            return account
        account, _ = await self.accounts.open_account(
            student_id, academic_year=academic_year, close_other_years=False
        )
        return account

    async def record(self, payload: PaymentRecordRequest) -> PaymentRecordResponse:
        allocations = self.validate_allocations(payload.allocations)
        payment_date = parse_payment_date(payload.payment_date)
        academic_year = await self.payment_year(payload, allocations)
        account = await self.ledger_account(payload.student_id, academic_year)

        try:
            payment, rows = await self._apply(payload, allocations, account, payment_date)
            response = PaymentRecordResponse(
                payment=PaymentResponse.model_validate(payment),
                allocations=[AllocationResponse.model_validate(r) for r in rows],
            )
            await self.db.commit()
        except ServiceError as e:
            await self.db.rollback()
            logger.warning("Rejected payment for student %s: %s", payload.student_id, e.message)
            raise
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception(
                "Recording payment failed for student %s (%d allocations)",
                payload.student_id, len(allocations),
            )
            raise InternalError()

        logger.info(
            "Recorded payment %s of %s for student %s on ledger %s (%d allocations, %s)",
            payment.id, payment.amount, payload.student_id, account.ledger_number, len(rows), payment.status,
        )
        response.summary = await self.summaries.summarize(payload.student_id, account.academic_year)
        return response


async def verify_payment(db: AsyncSession, payment_id: int, verified_by: Optional[int] = None) -> PaymentResponse:
    payment = await db.get(Payment, payment_id)
    if not payment:
        raise NotFoundError(f"Payment {payment_id} not found")
    if payment.status == PaymentStatus.paid.value and payment.verified_at is not None:
        return PaymentResponse.model_validate(payment)
    payment.status = PaymentStatus.paid.value
    payment.verified_by = verified_by
    payment.verified_at = datetime.now(timezone.utc)
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Verifying payment %s failed", payment_id)
        raise InternalError()
    await db.refresh(payment)
    logger.info("Verified payment %s by %s", payment_id, verified_by)
    return PaymentResponse.model_validate(payment)


async def list_payments(
    db: AsyncSession,
    student_id: Optional[int] = None,
    academic_year: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[PaymentResponse]:
    stmt = select(Payment)
    if student_id is not None:
        stmt = stmt.where(Payment.student_id == student_id)
    if academic_year:
        stmt = stmt.where(Payment.academic_year == academic_year)
    stmt = stmt.order_by(Payment.payment_date.desc(), Payment.id.desc())
    if limit:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return [PaymentResponse.model_validate(p) for p in result.scalars().all()]


async def get_receipt(
    db: AsyncSession,
    payment_id: int,
    roster: Optional[RosterProvider] = None,
) -> PaymentReceipt:
    """Payment, its allocations and the payer's identity, for rendering only."""
    payment = await db.get(Payment, payment_id)
    if not payment:
        raise NotFoundError(f"Payment {payment_id} not found")
    allocations = (
        await db.execute(
            select(PaymentAllocation)
            .where(PaymentAllocation.payment_id == payment_id)
            .order_by(PaymentAllocation.id)
        )
    ).scalars().all()
    roster = roster or SqlRosterProvider(db)
    student = await roster.get_student(payment.student_id)
    if not student:
        raise NotFoundError(f"Student {payment.student_id} not found")
    account = await db.get(StudentAccount, payment.account_id) if payment.account_id else None
    return PaymentReceipt(
        payment=PaymentResponse.model_validate(payment),
        allocations=[AllocationResponse.model_validate(a) for a in allocations],
        student=await FinanceSummaryBuilder(db, roster=roster).student_identity(student),
        ledger_number=account.ledger_number if account else None,
    )
