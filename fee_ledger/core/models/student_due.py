"""Student due: one amount owed on an account (one-time charge or a month's installment)."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from fee_ledger.core.enums import DueStatus, DueType, ItemType, check_values
from fee_ledger.db.session import Base


class StudentDue(Base):
    """
    paid_amount only moves through payment recording; status is always derived from
    paid_amount vs amount (see fee_ledger.core.money.due_status).
    """

    __tablename__ = "student_dues"
    __table_args__ = (
        CheckConstraint(f"due_type IN ({check_values(DueType)})", name="chk_student_due_type"),
        CheckConstraint(f"item_type IN ({check_values(ItemType)})", name="chk_student_due_item_type"),
        CheckConstraint(f"status IN ({check_values(DueStatus)})", name="chk_student_due_status"),
        CheckConstraint("paid_amount >= 0", name="chk_student_due_paid_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("student_accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    due_type = Column(String(20), nullable=False)
    item_type = Column(String(20), nullable=False)
    academic_year = Column(String(20), nullable=False)
    due_month = Column(String(7), nullable=True)  # YYYY-MM, monthly dues only
    amount = Column(Numeric(10, 2), nullable=False)
    paid_amount = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default=DueStatus.due.value, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    account = relationship("StudentAccount")
