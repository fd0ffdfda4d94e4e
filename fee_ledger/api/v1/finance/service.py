"""
Finance service: read-only projections over a student's dues.

FinanceSummaryBuilder groups one student's dues for a year into one-time, monthly and
misc buckets with totals. list_dues is the school-wide listing with roster names joined in.
Neither runs in a snapshot transaction; a concurrently recorded payment may or may not show.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.academic_calendar import AcademicYearCalendar
from fee_ledger.core.enums import DueStatus, DueType, ItemType
from fee_ledger.core.exceptions import NotFoundError, ValidationError
from fee_ledger.core.labels import due_label
from fee_ledger.core.models import SchoolClass, Student, StudentAccount, StudentDue
from fee_ledger.core.money import outstanding, to_decimal
from fee_ledger.core.roster import RosterProvider, SqlRosterProvider, StudentInfo

from .schemas import (
    AccountRef,
    DueItem,
    DueListItem,
    FinanceBuckets,
    FinanceSummary,
    FinanceTotals,
    StudentIdentity,
)


def due_item_fields(due: StudentDue) -> dict:
    amount = to_decimal(due.amount)
    paid = to_decimal(due.paid_amount)
    return {
        "id": due.id,
        "due_type": due.due_type,
        "item_type": due.item_type,
        "label": due_label(due.item_type, due.due_month, due.notes),
        "due_month": due.due_month,
        "amount": amount,
        "paid_amount": paid,
        "balance": outstanding(amount, paid),
        "status": due.status,
        "notes": due.notes,
    }


def bucket_for(item: DueItem) -> str:
    if item.due_type is DueType.monthly:
        return "monthly"
    if item.item_type is ItemType.misc:
        return "misc"
    return "one_time"


def summarize_dues(dues: List[StudentDue]):
    """Buckets and totals for a list of dues, in the order given."""
    buckets = FinanceBuckets()
    totals = FinanceTotals()
    for due in dues:
        item = DueItem(**due_item_fields(due))
        getattr(buckets, bucket_for(item)).append(item)
        if item.balance > 0:
            totals.outstanding += item.balance
        else:
            totals.fully_paid += item.paid_amount
        if item.status is DueStatus.partial:
            totals.partial_count += 1
        elif item.status is DueStatus.due:
            totals.due_count += 1
    return buckets, totals


class FinanceSummaryBuilder:
    def __init__(
        self,
        db: AsyncSession,
        roster: Optional[RosterProvider] = None,
        calendar: Optional[AcademicYearCalendar] = None,
    ) -> None:
        self.db = db
        self.roster = roster or SqlRosterProvider(db)
        self.calendar = calendar or AcademicYearCalendar()

    async def student_identity(self, student: StudentInfo) -> StudentIdentity:
        school_class = await self.roster.get_class(student.class_id) if student.class_id else None
        return StudentIdentity(
            id=student.id,
            name=student.name,
            admission_number=student.admission_number,
            class_id=student.class_id,
            class_name=school_class.name if school_class else None,
            section=school_class.section if school_class else None,
            is_hosteller=student.is_hosteller,
            guardian_name=student.guardian_name,
            guardian_phone=student.guardian_phone,
        )

    async def summarize(self, student_id: int, academic_year: Optional[str] = None) -> Optional[FinanceSummary]:
        """None when the student has neither an account nor dues for the year."""
        year = (academic_year or "").strip() or self.calendar.current_year()
        if not self.calendar.is_valid(year):
            raise ValidationError(f"Invalid academic year '{academic_year}'")
        student = await self.roster.get_student(student_id)
        if not student:
            raise NotFoundError(f"Student {student_id} not found")

        account = (
            await self.db.execute(
                select(StudentAccount)
                .where(StudentAccount.student_id == student_id, StudentAccount.academic_year == year)
                .order_by(StudentAccount.opened_at.desc(), StudentAccount.id.desc())
                .limit(1)
            )
        ).scalar_one_or_none()
        dues = list(
            (
                await self.db.execute(
                    select(StudentDue)
                    .where(StudentDue.student_id == student_id, StudentDue.academic_year == year)
                    .order_by(StudentDue.due_month.asc().nulls_first(), StudentDue.id.asc())
                )
            ).scalars().all()
        )
        if account is None and not dues:
            return None

        buckets, totals = summarize_dues(dues)
        return FinanceSummary(
            student=await self.student_identity(student),
            academic_year=year,
            account=AccountRef.model_validate(account) if account else None,
            totals=totals,
            buckets=buckets,
        )


async def list_dues(
    db: AsyncSession,
    academic_year: Optional[str] = None,
    status: Optional[DueStatus] = None,
    due_type: Optional[DueType] = None,
    class_id: Optional[int] = None,
    month: Optional[str] = None,
    student_id: Optional[int] = None,
) -> List[DueListItem]:
    stmt = (
        select(StudentDue, Student.name, Student.class_id, SchoolClass.name, StudentAccount.ledger_number)
        .join(Student, Student.id == StudentDue.student_id)
        .outerjoin(SchoolClass, SchoolClass.id == Student.class_id)
        .outerjoin(StudentAccount, StudentAccount.id == StudentDue.account_id)
    )
    if academic_year:
        stmt = stmt.where(StudentDue.academic_year == academic_year)
    if status is not None:
        stmt = stmt.where(StudentDue.status == DueStatus(status).value)
    if due_type is not None:
        stmt = stmt.where(StudentDue.due_type == DueType(due_type).value)
    if class_id is not None:
        stmt = stmt.where(Student.class_id == class_id)
    if month:
        stmt = stmt.where(StudentDue.due_month == month)
    if student_id is not None:
        stmt = stmt.where(StudentDue.student_id == student_id)
    stmt = stmt.order_by(Student.name.asc(), StudentDue.due_month.asc().nulls_first(), StudentDue.id.asc())

    rows = (await db.execute(stmt)).all()
    return [
        DueListItem(
            **due_item_fields(due),
            student_id=due.student_id,
            student_name=student_name,
            academic_year=due.academic_year,
            class_id=cls_id,
            class_name=class_name,
            ledger_number=ledger_number,
        )
        for due, student_name, cls_id, class_name, ledger_number in rows
    ]
