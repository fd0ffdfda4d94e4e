"""
Transport fee service: register a student on a bus route for a year, list registrations.

A registration made while the student has an open account for the year bills that account
straight away; otherwise its dues are seeded when the account is opened.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.api.v1.accounts.service import AccountManager
from fee_ledger.core.academic_calendar import AcademicYearCalendar
from fee_ledger.core.exceptions import InternalError, NotFoundError, ServiceError, ValidationError
from fee_ledger.core.models import SchoolClass, Student, TransportFee
from fee_ledger.core.money import round_amount

from .schemas import TransportFeeCreate, TransportFeeCreateResponse, TransportFeeListItem, TransportFeeResponse

logger = logging.getLogger(__name__)


async def create_transport_fee(
    db: AsyncSession,
    payload: TransportFeeCreate,
    calendar: Optional[AcademicYearCalendar] = None,
) -> TransportFeeCreateResponse:
    accounts = AccountManager(db, calendar=calendar)
    academic_year = payload.academic_year.strip()
    if not accounts.calendar.is_valid(academic_year):
        raise ValidationError(f"Invalid academic year '{payload.academic_year}'")
    if payload.end_date is not None and payload.end_date < payload.start_date:
        raise ValidationError("Transport end date is before its start date")
    if not accounts.calendar.months_between(academic_year, payload.start_date, payload.end_date):
        raise ValidationError(f"Transport period does not overlap academic year {academic_year}")
    if not await db.get(Student, payload.student_id):
        raise NotFoundError(f"Student {payload.student_id} not found")

    registration = TransportFee(
        student_id=payload.student_id,
        route_name=payload.route_name.strip(),
        monthly_amount=round_amount(payload.monthly_amount),
        academic_year=academic_year,
        start_date=payload.start_date,
        end_date=payload.end_date,
        is_active=True,
    )
    try:
        db.add(registration)
        await db.flush()
        dues = []
        account = await accounts.find_open_account(payload.student_id, academic_year)
        if account is not None:
            dues = accounts.seeder.build_transport_dues(account, [registration], academic_year)
            db.add_all(dues)
        await db.commit()
    except ServiceError:
        await db.rollback()
        raise
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Registering transport failed for student %s in %s", payload.student_id, academic_year)
        raise InternalError()

    await db.refresh(registration)
    logger.info(
        "Registered student %s on route %s for %s (%d dues added)",
        registration.student_id, registration.route_name, academic_year, len(dues),
    )
    return TransportFeeCreateResponse(
        transport_fee=TransportFeeResponse.model_validate(registration),
        dues_created=len(dues),
    )


async def list_transport_fees(db: AsyncSession, academic_year: Optional[str] = None) -> List[TransportFeeListItem]:
    """Active registrations with student and class names, by route then student name."""
    stmt = (
        select(TransportFee, Student.name, SchoolClass.name)
        .join(Student, Student.id == TransportFee.student_id)
        .outerjoin(SchoolClass, SchoolClass.id == Student.class_id)
        .where(TransportFee.is_active.is_(True))
    )
    if academic_year:
        stmt = stmt.where(TransportFee.academic_year == academic_year)
    stmt = stmt.order_by(TransportFee.route_name.asc(), Student.name.asc(), TransportFee.id.asc())

    rows = (await db.execute(stmt)).all()
    return [
        TransportFeeListItem(
            **TransportFeeResponse.model_validate(registration).model_dump(),
            student_name=student_name,
            class_name=class_name,
        )
        for registration, student_name, class_name in rows
    ]
