from typing import List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.academic_calendar import AcademicYearCalendar
from fee_ledger.core.exceptions import ConflictError, NotFoundError, ValidationError
from fee_ledger.core.models import AcademicYear

from .schemas import AcademicYearCreate, AcademicYearResponse


def _to_response(ay: AcademicYear) -> AcademicYearResponse:
    return AcademicYearResponse.model_validate(ay)


async def create_academic_year(
    db: AsyncSession,
    payload: AcademicYearCreate,
    calendar: Optional[AcademicYearCalendar] = None,
) -> AcademicYearResponse:
    """Create academic year. If is_current=true, unset current on all other years (transaction)."""
    calendar = calendar or AcademicYearCalendar()
    code = payload.code.strip()
    if not calendar.is_valid(code):
        raise ValidationError(f"Invalid academic year code '{payload.code}'; expected e.g. 2024-25")
    name = (payload.name or "").strip() or f"Academic Year {code}"
    default_start, default_end = calendar.bounds(code)
    start_date = payload.start_date or default_start
    end_date = payload.end_date or default_end
    if end_date <= start_date:
        raise ValidationError("end_date must be after start_date")

    existing = await db.execute(
        select(AcademicYear).where(or_(AcademicYear.code == code, AcademicYear.name == name))
    )
    if existing.scalars().first():
        raise ConflictError(f"Academic year '{code}' or name '{name}' already exists")
    if payload.is_current:
        await db.execute(update(AcademicYear).values(is_current=False))
    ay = AcademicYear(
        code=code,
        name=name,
        start_date=start_date,
        end_date=end_date,
        is_active=True,
        is_current=payload.is_current,
    )
    db.add(ay)
    try:
        await db.commit()
        await db.refresh(ay)
        return _to_response(ay)
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Academic year '{code}' or name '{name}' already exists")


async def list_academic_years(db: AsyncSession) -> List[AcademicYearResponse]:
    """Current year first, then newest code first."""
    stmt = select(AcademicYear).order_by(AcademicYear.is_current.desc(), AcademicYear.code.desc())
    result = await db.execute(stmt)
    return [_to_response(ay) for ay in result.scalars().all()]


async def get_current_academic_year(db: AsyncSession) -> Optional[AcademicYearResponse]:
    result = await db.execute(select(AcademicYear).where(AcademicYear.is_current.is_(True)))
    ay = result.scalars().first()
    return _to_response(ay) if ay else None


async def set_academic_year_current(db: AsyncSession, code: str) -> AcademicYearResponse:
    """Set this academic year as current. All others become is_current=false (transaction)."""
    ay = await db.get(AcademicYear, code)
    if not ay:
        raise NotFoundError(f"Academic year '{code}' not found")
    await db.execute(update(AcademicYear).where(AcademicYear.code != code).values(is_current=False))
    ay.is_current = True
    await db.commit()
    await db.refresh(ay)
    return _to_response(ay)
