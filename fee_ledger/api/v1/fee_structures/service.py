"""Fee structure service: create/replace the component set for a class and academic year."""

from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.academic_calendar import AcademicYearCalendar
from fee_ledger.core.exceptions import ConflictError, ValidationError
from fee_ledger.core.models import ClassFeeStructure, SchoolClass

from .resolver import components_from_structure
from .schemas import ClassFeeStructureResponse, ClassFeeStructureUpsert


def _to_response(cfs: ClassFeeStructure) -> ClassFeeStructureResponse:
    resolved = components_from_structure(cfs)
    return ClassFeeStructureResponse(
        id=cfs.id,
        class_id=cfs.class_id,
        academic_year=cfs.academic_year,
        is_active=cfs.is_active,
        resident=resolved.resident,
        non_resident=resolved.non_resident,
        created_at=cfs.created_at,
        updated_at=cfs.updated_at,
    )


async def _apply_upsert(db: AsyncSession, payload: ClassFeeStructureUpsert) -> ClassFeeStructure:
    academic_year = payload.academic_year.strip()
    if not AcademicYearCalendar().is_valid(academic_year):
        raise ValidationError(f"Invalid academic year '{payload.academic_year}'")
    if not await db.get(SchoolClass, payload.class_id):
        raise ValidationError(f"Invalid class {payload.class_id}")
    cfs = (
        await db.execute(
            select(ClassFeeStructure).where(
                ClassFeeStructure.class_id == payload.class_id,
                ClassFeeStructure.academic_year == academic_year,
            )
        )
    ).scalar_one_or_none()
    if cfs is None:
        cfs = ClassFeeStructure(class_id=payload.class_id, academic_year=academic_year)
        db.add(cfs)
    cfs.is_active = True
    cfs.set_components("resident", payload.resident.model_dump(by_alias=True))
    cfs.set_components("non_resident", payload.non_resident.model_dump(by_alias=True))
    return cfs


async def upsert_class_fee_structure(
    db: AsyncSession,
    payload: ClassFeeStructureUpsert,
) -> ClassFeeStructureResponse:
    return (await bulk_upsert_class_fee_structures(db, [payload]))[0]


async def bulk_upsert_class_fee_structures(
    db: AsyncSession,
    items: List[ClassFeeStructureUpsert],
) -> List[ClassFeeStructureResponse]:
    """All-or-nothing: one invalid item leaves every structure untouched."""
    keys = [(item.class_id, item.academic_year.strip()) for item in items]
    if len(set(keys)) != len(keys):
        raise ValidationError("Duplicate class and academic year in fee structure batch")
    try:
        saved = [await _apply_upsert(db, item) for item in items]
        await db.commit()
    except ValidationError:
        await db.rollback()
        raise
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Fee structure was modified concurrently; retry the save")
    for cfs in saved:
        await db.refresh(cfs)
    return [_to_response(cfs) for cfs in saved]


async def list_class_fee_structures(
    db: AsyncSession,
    academic_year: str,
    active_only: bool = True,
) -> List[ClassFeeStructureResponse]:
    stmt = select(ClassFeeStructure).where(ClassFeeStructure.academic_year == academic_year)
    if active_only:
        stmt = stmt.where(ClassFeeStructure.is_active.is_(True))
    stmt = stmt.order_by(ClassFeeStructure.class_id)
    result = await db.execute(stmt)
    return [_to_response(c) for c in result.scalars().all()]
