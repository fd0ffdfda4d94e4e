"""
Seed the dues a student owes for an academic year when their account is opened.

Runs inside the caller's transaction and never commits. Active transport registrations for
the year add one transport due per covered month. Seeding is idempotent per
(account, academic_year): once any due exists for the pair nothing more is created.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.api.v1.fee_structures.resolver import FeeComponentResolver
from fee_ledger.api.v1.fee_structures.schemas import FeeComponentSet
from fee_ledger.core.academic_calendar import AcademicYearCalendar
from fee_ledger.core.enums import DueStatus, DueType, ItemType
from fee_ledger.core.models import StudentAccount, StudentDue, TransportFee
from fee_ledger.core.money import ZERO, round_amount
from fee_ledger.core.roster import StudentInfo

logger = logging.getLogger(__name__)


def _one_time_items(components: FeeComponentSet, is_new_admission: bool):
    return [
        (ItemType.admission if is_new_admission else ItemType.registration, components.admission),
        (ItemType.uniform, components.uniform),
        (ItemType.hostel_dress, components.hostel_dress),
        (ItemType.copy, components.copy_),
        (ItemType.book, components.book),
    ]


def _new_due(
    account: StudentAccount,
    academic_year: str,
    due_type: DueType,
    item_type: ItemType,
    amount,
    due_month: Optional[str] = None,
    notes: Optional[str] = None,
) -> StudentDue:
    return StudentDue(
        student_id=account.student_id,
        account_id=account.id,
        due_type=due_type.value,
        item_type=item_type.value,
        academic_year=academic_year,
        due_month=due_month,
        amount=round_amount(amount),
        paid_amount=ZERO,
        status=DueStatus.due.value,
        notes=notes,
    )


class DueSeeder:
    def __init__(
        self,
        db: AsyncSession,
        resolver: Optional[FeeComponentResolver] = None,
        calendar: Optional[AcademicYearCalendar] = None,
    ) -> None:
        self.db = db
        self.resolver = resolver or FeeComponentResolver(db)
        self.calendar = calendar or AcademicYearCalendar()

    async def has_dues(self, account_id: int, academic_year: str) -> bool:
        row = (
            await self.db.execute(
                select(StudentDue.id)
                .where(StudentDue.account_id == account_id, StudentDue.academic_year == academic_year)
                .limit(1)
            )
        ).scalar_one_or_none()
        return row is not None

    def build_dues(
        self,
        account: StudentAccount,
        components: FeeComponentSet,
        academic_year: str,
        is_new_admission: bool,
    ) -> List[StudentDue]:
        dues = [
            _new_due(account, academic_year, DueType.one_time, item_type, amount)
            for item_type, amount in _one_time_items(components, is_new_admission)
            if round_amount(amount) > 0
        ]
        monthly = round_amount(components.monthly)
        if monthly > 0:
            dues += [
                _new_due(account, academic_year, DueType.monthly, ItemType.monthly, monthly, due_month=month)
                for month in self.calendar.months_of(academic_year)
            ]
        return dues

    def build_transport_dues(
        self,
        account: StudentAccount,
        registrations: Iterable[TransportFee],
        academic_year: str,
    ) -> List[StudentDue]:
        """One monthly due per registration per month of the year inside its start/end dates."""
        return [
            _new_due(
                account, academic_year, DueType.monthly, ItemType.transport,
                registration.monthly_amount, due_month=month, notes=registration.route_name,
            )
            for registration in registrations
            for month in self.calendar.months_between(academic_year, registration.start_date, registration.end_date)
        ]

    async def transport_registrations(self, student_id: int, academic_year: str) -> List[TransportFee]:
        result = await self.db.execute(
            select(TransportFee)
            .where(
                TransportFee.student_id == student_id,
                TransportFee.academic_year == academic_year,
                TransportFee.is_active.is_(True),
            )
            .order_by(TransportFee.id)
        )
        return list(result.scalars().all())

    async def seed(
        self,
        account: StudentAccount,
        student: StudentInfo,
        academic_year: str,
        is_new_admission: bool,
    ) -> int:
        if await self.has_dues(account.id, academic_year):
            return 0
        resolved = await self.resolver.resolve(student.class_id, academic_year)
        components = resolved.for_student(student.is_hosteller)
        dues = self.build_dues(account, components, academic_year, is_new_admission)
        dues += self.build_transport_dues(
            account, await self.transport_registrations(student.id, academic_year), academic_year
        )
        if not dues:
            return 0
        self.db.add_all(dues)
        await self.db.flush()
        logger.info(
            "Seeded %d dues for account %s (%s, student %s)",
            len(dues), account.ledger_number, academic_year, account.student_id,
        )
        return len(dues)
