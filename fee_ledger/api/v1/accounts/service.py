"""
Account service: open, reuse or reopen a student's ledger account for an academic year.

A new account and its seeded dues are committed together. The roster's account_opened
flag is set afterwards, outside that transaction.
"""

import logging
import re
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.api.v1.fee_structures.resolver import FeeComponentResolver
from fee_ledger.core.academic_calendar import AcademicYearCalendar
from fee_ledger.core.config import settings
from fee_ledger.core.enums import AccountStatus
from fee_ledger.core.exceptions import ConflictError, InternalError, NotFoundError, ServiceError, ValidationError
from fee_ledger.core.models import StudentAccount
from fee_ledger.core.roster import RosterProvider, SqlRosterProvider, StudentInfo

from .seeder import DueSeeder

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^A-Z0-9]+")


def ledger_base(student: StudentInfo) -> str:
    """
    Admission number upper-cased with every run of other characters collapsed to '-'
    ("adm/2024 001" -> "ADM-2024-001"). Without one: zero-padded id ("STU000042").
    """
    admission = _NON_ALNUM.sub("-", (student.admission_number or "").strip().upper()).strip("-")
    if admission:
        return admission
    return f"{settings.ledger_fallback_prefix}{student.id:0{settings.ledger_fallback_width}d}"


def ledger_number_for(student: StudentInfo, academic_year: str, previous_accounts: int = 0) -> str:
    number = f"{ledger_base(student)}/{academic_year}"
    if previous_accounts:
        number += f"/R{previous_accounts}"
    return number


class AccountManager:
    def __init__(
        self,
        db: AsyncSession,
        roster: Optional[RosterProvider] = None,
        resolver: Optional[FeeComponentResolver] = None,
        calendar: Optional[AcademicYearCalendar] = None,
    ) -> None:
        self.db = db
        self.roster = roster or SqlRosterProvider(db)
        self.calendar = calendar or AcademicYearCalendar()
        self.seeder = DueSeeder(db, resolver=resolver, calendar=self.calendar)

    def resolve_year(self, academic_year: Optional[str]) -> str:
        year = (academic_year or "").strip() or self.calendar.current_year()
        if not self.calendar.is_valid(year):
            raise ValidationError(f"Invalid academic year '{academic_year}'; expected e.g. 2024-25")
        return year

    async def _open_accounts(self, student_id: int) -> List[StudentAccount]:
        result = await self.db.execute(
            select(StudentAccount)
            .where(
                StudentAccount.student_id == student_id,
                StudentAccount.status == AccountStatus.open.value,
            )
            .order_by(StudentAccount.opened_at.desc(), StudentAccount.id.desc())
        )
        return list(result.scalars().all())

    async def _count_accounts(self, student_id: int, academic_year: Optional[str] = None) -> int:
        stmt = select(func.count(StudentAccount.id)).where(StudentAccount.student_id == student_id)
        if academic_year is not None:
            stmt = stmt.where(StudentAccount.academic_year == academic_year)
        return (await self.db.execute(stmt)).scalar() or 0

    async def infer_new_admission(self, student: StudentInfo, academic_year: str) -> bool:
        """Admitted on/after the year's start; with no admission date, never had an account."""
        if student.admission_date is not None:
            year_start, _ = self.calendar.bounds(academic_year)
            return student.admission_date >= year_start
        return await self._count_accounts(student.id) == 0

    async def find_open_account(self, student_id: int, academic_year: str) -> Optional[StudentAccount]:
        for account in await self._open_accounts(student_id):
            if account.academic_year == academic_year:
                return account
        return None

    async def get_account(self, student_id: int, academic_year: Optional[str] = None) -> StudentAccount:
        """Most recent account (open or closed) for the student and year."""
        year = self.resolve_year(academic_year)
        account = await self.latest_account(student_id, year)
        if not account:
            raise NotFoundError(f"No ledger account for student {student_id} in {year}")
        return account

    async def latest_account(self, student_id: int, academic_year: str) -> Optional[StudentAccount]:
        result = await self.db.execute(
            select(StudentAccount)
            .where(
                StudentAccount.student_id == student_id,
                StudentAccount.academic_year == academic_year,
            )
            .order_by(StudentAccount.opened_at.desc(), StudentAccount.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _create_account(self, student: StudentInfo, academic_year: str) -> StudentAccount:
        previous = await self._count_accounts(student.id, academic_year)
        ledger_number = ledger_number_for(student, academic_year, previous)
        taken = (
            await self.db.execute(
                select(StudentAccount.id).where(StudentAccount.ledger_number == ledger_number)
            )
        ).scalar_one_or_none()
        if taken:
            raise ConflictError(f"Ledger number {ledger_number} is already in use")
        account = StudentAccount(
            student_id=student.id,
            ledger_number=ledger_number,
            status=AccountStatus.open.value,
            academic_year=academic_year,
            opened_at=datetime.now(timezone.utc),
        )
        self.db.add(account)
        await self.db.flush()
        return account

    async def _open(
        self,
        student: StudentInfo,
        academic_year: str,
        reopen: bool,
        is_new_admission: bool,
        close_other_years: bool = True,
    ) -> Tuple[StudentAccount, int]:
        open_accounts = await self._open_accounts(student.id)
        same_year = [a for a in open_accounts if a.academic_year == academic_year]
        if same_year and not reopen:
            account = same_year[0]
            created = await self.seeder.seed(account, student, academic_year, is_new_admission)
            logger.info("Reusing ledger %s for student %s", account.ledger_number, student.id)
            return account, created

        now = datetime.now(timezone.utc)
        for existing in (open_accounts if close_other_years else same_year):
            existing.status = AccountStatus.closed.value
            existing.closed_at = now
            logger.info("Closed ledger %s for student %s", existing.ledger_number, student.id)
        # The partial unique index must see the closures before the new row goes in.
        await self.db.flush()

        account = await self._create_account(student, academic_year)
        created = await self.seeder.seed(account, student, academic_year, is_new_admission)
        logger.info("Opened ledger %s for student %s", account.ledger_number, student.id)
        return account, created

    async def open_account(
        self,
        student_id: int,
        academic_year: Optional[str] = None,
        reopen: bool = False,
        is_new_admission: Optional[bool] = None,
        close_other_years: bool = True,
    ) -> Tuple[StudentAccount, int]:
        """
        Reuse the open account for the year or open one (closing other open accounts unless
        close_other_years is false). reopen closes the year's open account and starts a new ledger.
        """
        student = await self.roster.get_student(student_id)
        if not student:
            raise NotFoundError(f"Student {student_id} not found")
        year = self.resolve_year(academic_year)
        if is_new_admission is None:
            is_new_admission = await self.infer_new_admission(student, year)

        try:
            account, created = await self._open(student, year, reopen, is_new_admission, close_other_years)
            await self.db.commit()
        except ServiceError:
            await self.db.rollback()
            raise
        except IntegrityError:
            await self.db.rollback()
            # Lost a race with a concurrent open for the same student and year: reuse theirs.
            account = await self.find_open_account(student_id, year)
            if account is None:
                raise ConflictError(f"Could not open a ledger for student {student_id} in {year}; ledger number conflict")
            created = 0
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("Opening ledger failed for student %s in %s", student_id, year)
            raise InternalError()

        await self.db.refresh(account)
        await self.roster.mark_account_opened(student_id)
        return account, created
