import os
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fee_ledger.core.models import ClassFeeStructure, SchoolClass, Student
from fee_ledger.db.session import Base, get_db
from fee_ledger.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture()
async def engine():
    """One in-memory SQLite database per test, shared by every connection through StaticPool."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override FastAPI dependency."""
    async_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def school_class(db_session: AsyncSession) -> SchoolClass:
    cl = SchoolClass(name="5th Grade", section="A", track="Science", active=True)
    db_session.add(cl)
    await db_session.commit()
    return cl


@pytest.fixture()
async def student(db_session: AsyncSession, school_class: SchoolClass) -> Student:
    """Day scholar admitted before the 2024-25 year starts."""
    st = Student(
        name="Jane Doe",
        admission_number="ADM002",
        admission_date=date(2023, 6, 1),
        class_id=school_class.id,
        is_hosteller=False,
        guardian_name="Mary Doe",
        guardian_phone="+1234567891",
    )
    db_session.add(st)
    await db_session.commit()
    return st


@pytest.fixture()
async def fee_structure(db_session: AsyncSession, school_class: SchoolClass) -> ClassFeeStructure:
    """2024-25 structure: admission 5000 + monthly 1200 for day scholars, higher for hostellers."""
    cfs = ClassFeeStructure(class_id=school_class.id, academic_year="2024-25", is_active=True)
    cfs.set_components("non_resident", {"admission": Decimal("5000"), "monthly": Decimal("1200")})
    cfs.set_components(
        "resident",
        {"admission": Decimal("7000"), "hostel_dress": Decimal("900"), "monthly": Decimal("3000")},
    )
    db_session.add(cfs)
    await db_session.commit()
    return cfs
