"""Finance summary, dues listing and the full open-then-pay flow over HTTP."""

from decimal import Decimal

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.api.v1.accounts.service import AccountManager
from fee_ledger.api.v1.finance.service import FinanceSummaryBuilder, list_dues
from fee_ledger.core.enums import DueStatus, DueType
from fee_ledger.core.models import ClassFeeStructure, SchoolClass, Student


async def test_summary_is_none_before_any_account(db_session: AsyncSession, student: Student) -> None:
    assert await FinanceSummaryBuilder(db_session).summarize(student.id, "2024-25") is None


async def test_summary_buckets_and_totals(
    db_session: AsyncSession, student: Student, fee_structure: ClassFeeStructure
) -> None:
    await AccountManager(db_session).open_account(student.id, academic_year="2024-25", is_new_admission=True)
    summary = await FinanceSummaryBuilder(db_session).summarize(student.id, "2024-25")

    assert summary.student.name == "Jane Doe"
    assert summary.student.class_name == "5th Grade"
    assert summary.account.ledger_number == "ADM002/2024-25"
    assert [i.label for i in summary.buckets.one_time] == ["Admission Fee"]
    assert summary.buckets.monthly[0].label == "Monthly Fee (Apr 2024)"
    assert summary.buckets.monthly[-1].label == "Monthly Fee (Mar 2025)"
    assert summary.buckets.misc == []
    assert summary.totals.outstanding == Decimal("5000") + 12 * Decimal("1200")
    assert summary.totals.fully_paid == Decimal("0")
    assert summary.totals.due_count == 13
    assert summary.totals.partial_count == 0


async def test_list_dues_filters(
    db_session: AsyncSession, student: Student, school_class: SchoolClass, fee_structure: ClassFeeStructure
) -> None:
    other = Student(name="Amy Davis", admission_number="ADM006", class_id=school_class.id)
    db_session.add(other)
    await db_session.commit()
    manager = AccountManager(db_session)
    await manager.open_account(student.id, academic_year="2024-25")
    await manager.open_account(other.id, academic_year="2024-25")

    everything = await list_dues(db_session, academic_year="2024-25")
    assert len(everything) == 26
    # Ordered by student name: Amy before Jane
    assert everything[0].student_name == "Amy Davis"
    assert everything[-1].student_name == "Jane Doe"
    assert everything[0].class_name == "5th Grade"
    assert everything[0].ledger_number == "ADM006/2024-25"

    april = await list_dues(db_session, month="2024-04", due_type=DueType.monthly)
    assert len(april) == 2
    assert all(d.label == "Monthly Fee (Apr 2024)" for d in april)

    mine = await list_dues(db_session, student_id=student.id, status=DueStatus.due)
    assert len(mine) == 13
    assert await list_dues(db_session, class_id=school_class.id + 1) == []


async def test_open_then_pay_end_to_end(
    client: AsyncClient, student: Student, fee_structure: ClassFeeStructure
) -> None:
    r = await client.post(
        "/api/v1/accounts/open",
        json={"student_id": student.id, "academic_year": "2024-25", "is_new_admission": True},
    )
    assert r.status_code == 201, r.text
    assert r.json()["dues_created"] == 13

    r = await client.get(f"/api/v1/finance/students/{student.id}", params={"academic_year": "2024-25"})
    assert r.status_code == 200
    buckets = r.json()["buckets"]
    admission_due = buckets["one_time"][0]
    april_due = buckets["monthly"][0]
    assert admission_due["item_type"] == "admission"
    assert Decimal(admission_due["amount"]) == Decimal("5000")
    assert april_due["due_month"] == "2024-04"
    assert Decimal(april_due["amount"]) == Decimal("1200")

    r = await client.post(
        "/api/v1/payments/record",
        json={
            "student_id": student.id,
            "academic_year": "2024-25",
            "payment_date": "2024-04-05",
            "payment_method": "upi",
            "reference_number": "UPI-88231",
            "verify": True,
            "allocations": [
                {"due_id": admission_due["id"], "amount": "5000"},
                {"due_id": april_due["id"], "amount": "1200"},
            ],
        },
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert Decimal(body["payment"]["amount"]) == Decimal("6200")
    assert body["payment"]["status"] == "paid"
    assert [a["label"] for a in body["allocations"]] == ["Admission Fee", "Monthly Fee (Apr 2024)"]

    summary = body["summary"]
    assert Decimal(summary["totals"]["outstanding"]) == Decimal("13200")
    assert Decimal(summary["totals"]["fully_paid"]) == Decimal("6200")
    assert summary["totals"]["due_count"] == 11
    statuses = [d["status"] for d in summary["buckets"]["monthly"]]
    assert statuses == ["paid"] + ["due"] * 11
    assert summary["buckets"]["one_time"][0]["status"] == "paid"

    payment_id = body["payment"]["id"]
    r = await client.get(f"/api/v1/payments/{payment_id}/receipt")
    assert r.status_code == 200
    assert r.json()["ledger_number"] == "ADM002/2024-25"

    r = await client.get("/api/v1/payments", params={"student_id": student.id})
    assert [p["id"] for p in r.json()] == [payment_id]


async def test_payment_errors_over_http(client: AsyncClient, student: Student, fee_structure: ClassFeeStructure) -> None:
    r = await client.post(
        "/api/v1/payments/record",
        json={
            "student_id": student.id,
            "academic_year": "2024-25",
            "payment_date": "2024-04-05",
            "payment_method": "cash",
            "allocations": [],
        },
    )
    assert r.status_code == 400

    r = await client.post(
        "/api/v1/payments/record",
        json={
            "student_id": student.id,
            "academic_year": "2024-25",
            "payment_date": "2024-04-05",
            "payment_method": "cash",
            "allocations": [{"due_id": 424242, "amount": "10"}],
        },
    )
    assert r.status_code == 404

    r = await client.patch("/api/v1/payments/424242/verify", json={"verified_by": 1})
    assert r.status_code == 404


async def test_finance_summary_unknown_student(client: AsyncClient) -> None:
    r = await client.get("/api/v1/finance/students/424242", params={"academic_year": "2024-25"})
    assert r.status_code == 404


async def test_finance_summary_null_when_nothing_owed(client: AsyncClient, student: Student) -> None:
    r = await client.get(f"/api/v1/finance/students/{student.id}", params={"academic_year": "2024-25"})
    assert r.status_code == 200
    assert r.json() is None
