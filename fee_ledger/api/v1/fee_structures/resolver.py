"""
Resolve the fee component set a class owes for an academic year.
Exact class+year first; otherwise the latest active structure for the class in any year,
so last year's pricing carries forward until new figures are entered. Nothing at all
resolves to zeros rather than an error.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.models import ClassFeeStructure
from fee_ledger.core.money import to_decimal

from .schemas import FeeComponentSet, ResolvedFeeComponents

logger = logging.getLogger(__name__)


def components_from_structure(cfs: ClassFeeStructure) -> ResolvedFeeComponents:
    return ResolvedFeeComponents(
        resident=FeeComponentSet(**{k: to_decimal(v) for k, v in cfs.components("resident").items()}),
        non_resident=FeeComponentSet(**{k: to_decimal(v) for k, v in cfs.components("non_resident").items()}),
    )


class FeeComponentResolver:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_structure(self, class_id: int, academic_year: str):
        exact = (
            await self.db.execute(
                select(ClassFeeStructure).where(
                    ClassFeeStructure.class_id == class_id,
                    ClassFeeStructure.academic_year == academic_year,
                    ClassFeeStructure.is_active.is_(True),
                )
            )
        ).scalar_one_or_none()
        if exact:
            return exact
        fallback = (
            await self.db.execute(
                select(ClassFeeStructure)
                .where(
                    ClassFeeStructure.class_id == class_id,
                    ClassFeeStructure.is_active.is_(True),
                )
                .order_by(ClassFeeStructure.academic_year.desc(), ClassFeeStructure.id.desc())
                .limit(1)
            )
        ).scalar_one_or_none()
        if fallback:
            logger.info(
                "No fee structure for class %s in %s; using %s",
                class_id, academic_year, fallback.academic_year,
            )
        return fallback

    async def resolve(self, class_id, academic_year: str) -> ResolvedFeeComponents:
        if class_id is None:
            return ResolvedFeeComponents()
        cfs = await self.find_structure(class_id, academic_year)
        if not cfs:
            return ResolvedFeeComponents()
        return components_from_structure(cfs)
