"""
Roster directory: the ledger's read-only view of students and classes.

Services depend on the RosterProvider protocol; SqlRosterProvider reads the roster tables
that live in the same database. Tests may pass any object with the same methods.
"""

import logging
from datetime import date
from typing import Optional, Protocol

from pydantic import BaseModel
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.models import SchoolClass, Student

logger = logging.getLogger(__name__)


class StudentInfo(BaseModel):
    id: int
    name: str
    class_id: Optional[int] = None
    is_hosteller: bool = False
    admission_number: Optional[str] = None
    admission_date: Optional[date] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None

    class Config:
        from_attributes = True


class ClassInfo(BaseModel):
    id: int
    name: str
    section: Optional[str] = None

    class Config:
        from_attributes = True


class RosterProvider(Protocol):
    async def get_student(self, student_id: int) -> Optional[StudentInfo]: ...

    async def get_class(self, class_id: int) -> Optional[ClassInfo]: ...

    async def mark_account_opened(self, student_id: int) -> None: ...


class SqlRosterProvider:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_student(self, student_id: int) -> Optional[StudentInfo]:
        student = await self.db.get(Student, student_id)
        return StudentInfo.model_validate(student) if student else None

    async def get_class(self, class_id: int) -> Optional[ClassInfo]:
        if class_id is None:
            return None
        cl = await self.db.get(SchoolClass, class_id)
        return ClassInfo.model_validate(cl) if cl else None

    async def mark_account_opened(self, student_id: int) -> None:
        """Best-effort flag update in its own commit; the ledger never reads it back."""
        try:
            await self.db.execute(
                update(Student).where(Student.id == student_id).values(account_opened=True)
            )
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.warning("Could not set account_opened for student %s", student_id, exc_info=True)
