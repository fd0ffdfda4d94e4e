"""
Create the ledger tables (and the roster tables they reference) in DATABASE_URL.

Usage:
    python -m fee_ledger.db.init_db            # tables only
    python -m fee_ledger.db.init_db --sample   # tables + a few classes and students

Existing tables and rows are left alone.
"""
import asyncio
import sys
from datetime import date
from typing import List, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

# Import all models so Base.metadata knows every table
from fee_ledger.core import models  # noqa: F401
from fee_ledger.core.models import SchoolClass, Student
from fee_ledger.db.session import AsyncSessionLocal, Base, engine


# (name, section, track)
SAMPLE_CLASSES: List[Tuple[str, str, str]] = [
    ("1st Grade", "A", "Science"),
    ("2nd Grade", "A", "Science"),
    ("3rd Grade", "B", "Arts"),
]

# (name, admission_number, class index, is_hosteller, guardian_name, guardian_phone)
SAMPLE_STUDENTS: List[Tuple[str, str, int, bool, str, str]] = [
    ("John Smith", "ADM001", 0, True, "Robert Smith", "+1234567890"),
    ("Jane Doe", "ADM002", 0, False, "Mary Doe", "+1234567891"),
    ("Mike Johnson", "ADM003", 1, True, "David Johnson", "+1234567892"),
    ("Sarah Wilson", "ADM004", 1, False, "Lisa Wilson", "+1234567893"),
    ("Tom Brown", "ADM005", 2, True, "James Brown", "+1234567894"),
]


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("Tables created (or already present).")


async def seed_sample_roster(db: AsyncSession) -> None:
    """Insert sample classes and students when the roster is empty."""
    existing = (await db.execute(select(func.count(Student.id)))).scalar() or 0
    if existing:
        print(f"Roster already has {existing} students; skipping sample data.")
        return

    classes = [SchoolClass(name=name, section=section, track=track, active=True) for name, section, track in SAMPLE_CLASSES]
    db.add_all(classes)
    await db.flush()

    db.add_all(
        [
            Student(
                name=name,
                admission_number=admission_number,
                admission_date=date(2024, 4, 1),
                class_id=classes[class_index].id,
                is_hosteller=is_hosteller,
                guardian_name=guardian_name,
                guardian_phone=guardian_phone,
                status="active",
            )
            for name, admission_number, class_index, is_hosteller, guardian_name, guardian_phone in SAMPLE_STUDENTS
        ]
    )
    await db.commit()
    print(f"Sample data: {len(classes)} classes, {len(SAMPLE_STUDENTS)} students.")


async def main(sample: bool = False) -> None:
    await create_tables()
    if sample:
        async with AsyncSessionLocal() as db:
            try:
                await seed_sample_roster(db)
            except Exception as e:
                print(f"Error seeding sample data: {e}")
                await db.rollback()
                raise
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main(sample="--sample" in sys.argv[1:]))
