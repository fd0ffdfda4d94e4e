"""Payment: money received from a student, split across one or more allocations."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from fee_ledger.core.enums import PaymentMethod, PaymentStatus, check_values
from fee_ledger.db.session import Base


class Payment(Base):
    """amount always equals the exact sum of its allocation amounts."""

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint(f"status IN ({check_values(PaymentStatus)})", name="chk_payment_status"),
        CheckConstraint(f"payment_method IN ({check_values(PaymentMethod)})", name="chk_payment_method"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("student_accounts.id", ondelete="SET NULL"), nullable=True)
    academic_year = Column(String(20), nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(30), nullable=False)
    reference_number = Column(String(100), nullable=True)
    payment_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default=PaymentStatus.pending.value, index=True)
    verified_by = Column(Integer, nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    remarks = Column(Text, nullable=True)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    allocations = relationship(
        "PaymentAllocation",
        back_populates="payment",
        order_by="PaymentAllocation.id",
        cascade="all, delete-orphan",
    )
