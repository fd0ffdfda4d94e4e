"""Transport registrations: validation, due billing on open accounts and at seeding, listing."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.api.v1.accounts.service import AccountManager
from fee_ledger.api.v1.finance.service import FinanceSummaryBuilder
from fee_ledger.api.v1.transport_fees import service
from fee_ledger.api.v1.transport_fees.schemas import TransportFeeCreate
from fee_ledger.core.academic_calendar import AcademicYearCalendar
from fee_ledger.core.enums import DueType, ItemType
from fee_ledger.core.exceptions import NotFoundError, ValidationError
from fee_ledger.core.models import ClassFeeStructure, SchoolClass, Student, StudentDue, TransportFee


def _registration(student_id: int, **overrides) -> TransportFeeCreate:
    values = {
        "student_id": student_id,
        "route_name": "Route A",
        "monthly_amount": Decimal("800"),
        "academic_year": "2024-25",
        "start_date": date(2024, 6, 15),
        "end_date": date(2024, 12, 31),
    }
    values.update(overrides)
    return TransportFeeCreate(**values)


async def _transport_dues(db: AsyncSession, student_id: int):
    result = await db.execute(
        select(StudentDue)
        .where(StudentDue.student_id == student_id, StudentDue.item_type == ItemType.transport.value)
        .order_by(StudentDue.due_month)
    )
    return result.scalars().all()


def test_months_between_clips_to_the_year() -> None:
    calendar = AcademicYearCalendar(start_month=4)
    assert calendar.months_between("2024-25", date(2024, 6, 15), date(2024, 8, 1)) == [
        "2024-06",
        "2024-07",
        "2024-08",
    ]
    assert calendar.months_between("2024-25", date(2025, 2, 1)) == ["2025-02", "2025-03"]
    assert calendar.months_between("2024-25", date(2023, 1, 1), date(2024, 4, 30)) == ["2024-04"]
    assert calendar.months_between("2024-25", date(2025, 6, 1)) == []


async def test_registration_before_opening_is_seeded_with_the_account(
    db_session: AsyncSession, student: Student, fee_structure: ClassFeeStructure
) -> None:
    created = await service.create_transport_fee(db_session, _registration(student.id))
    assert created.dues_created == 0
    assert created.transport_fee.is_active is True
    assert created.transport_fee.monthly_amount == Decimal("800.00")

    _, seeded = await AccountManager(db_session).open_account(student.id, academic_year="2024-25")
    # registration + twelve monthly fees + June to December transport
    assert seeded == 20

    dues = await _transport_dues(db_session, student.id)
    assert [d.due_month for d in dues] == ["2024-06", "2024-07", "2024-08", "2024-09", "2024-10", "2024-11", "2024-12"]
    assert all(d.due_type == DueType.monthly.value and d.amount == Decimal("800.00") for d in dues)
    assert dues[0].notes == "Route A"


async def test_registration_bills_the_open_account(
    db_session: AsyncSession, student: Student, fee_structure: ClassFeeStructure
) -> None:
    account, _ = await AccountManager(db_session).open_account(student.id, academic_year="2024-25")
    created = await service.create_transport_fee(
        db_session,
        _registration(student.id, route_name=" Route B ", monthly_amount=Decimal("650"),
                      start_date=date(2025, 1, 1), end_date=None),
    )
    assert created.dues_created == 3
    assert created.transport_fee.route_name == "Route B"

    dues = await _transport_dues(db_session, student.id)
    assert {d.account_id for d in dues} == {account.id}

    summary = await FinanceSummaryBuilder(db_session).summarize(student.id, "2024-25")
    transport = [i for i in summary.buckets.monthly if i.item_type is ItemType.transport]
    assert [i.label for i in transport] == [
        "Transport Fee: Route B (Jan 2025)",
        "Transport Fee: Route B (Feb 2025)",
        "Transport Fee: Route B (Mar 2025)",
    ]
    assert len(summary.buckets.monthly) == 15


@pytest.mark.parametrize(
    "overrides",
    [
        {"academic_year": "2024-27"},
        {"start_date": date(2024, 9, 1), "end_date": date(2024, 8, 1)},
        {"start_date": date(2026, 1, 1), "end_date": None},
    ],
)
async def test_invalid_registration_is_rejected(db_session: AsyncSession, student: Student, overrides) -> None:
    with pytest.raises(ValidationError):
        await service.create_transport_fee(db_session, _registration(student.id, **overrides))
    assert (await db_session.execute(select(func.count(TransportFee.id)))).scalar() == 0


async def test_registration_for_unknown_student(db_session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await service.create_transport_fee(db_session, _registration(9999))


async def test_list_orders_by_route_then_student(
    db_session: AsyncSession, student: Student, school_class: SchoolClass
) -> None:
    other = Student(name="Adam Smith", admission_number="ADM007", class_id=school_class.id)
    db_session.add(other)
    await db_session.commit()

    await service.create_transport_fee(db_session, _registration(student.id, route_name="Route B"))
    await service.create_transport_fee(db_session, _registration(other.id, route_name="Route A"))
    await service.create_transport_fee(db_session, _registration(student.id, route_name="Route A"))
    await service.create_transport_fee(
        db_session,
        _registration(student.id, route_name="Route C", academic_year="2025-26",
                      start_date=date(2025, 4, 1), end_date=None),
    )
    stopped = await service.create_transport_fee(db_session, _registration(other.id, route_name="Route A"))
    row = await db_session.get(TransportFee, stopped.transport_fee.id)
    row.is_active = False
    await db_session.commit()

    listed = await service.list_transport_fees(db_session, "2024-25")
    assert [(r.route_name, r.student_name) for r in listed] == [
        ("Route A", "Adam Smith"),
        ("Route A", "Jane Doe"),
        ("Route B", "Jane Doe"),
    ]
    assert {r.class_name for r in listed} == {"5th Grade"}
    assert len(await service.list_transport_fees(db_session)) == 4


async def test_transport_fee_api(client, student: Student) -> None:
    r = await client.post(
        "/api/v1/transport-fees",
        json={
            "student_id": student.id,
            "route_name": "Route A",
            "monthly_amount": "800",
            "academic_year": "2024-25",
            "start_date": "2024-06-15",
        },
    )
    assert r.status_code == 201, r.text
    assert r.json()["dues_created"] == 0
    assert r.json()["transport_fee"]["end_date"] is None

    r = await client.get("/api/v1/transport-fees", params={"academic_year": "2024-25"})
    assert r.status_code == 200
    assert [(i["route_name"], i["student_name"]) for i in r.json()] == [("Route A", "Jane Doe")]
    assert Decimal(r.json()[0]["monthly_amount"]) == Decimal("800")

    r = await client.get("/api/v1/transport-fees", params={"academic_year": "24-25"})
    assert r.status_code == 400

    r = await client.post(
        "/api/v1/transport-fees",
        json={"student_id": 9999, "route_name": "Route A", "monthly_amount": "800",
              "academic_year": "2024-25", "start_date": "2024-06-15"},
    )
    assert r.status_code == 404

    r = await client.post(
        "/api/v1/transport-fees",
        json={"student_id": student.id, "route_name": "Route A", "monthly_amount": "0",
              "academic_year": "2024-25", "start_date": "2024-06-15"},
    )
    assert r.status_code == 422
