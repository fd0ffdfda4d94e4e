from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from fee_ledger.db.session import Base


class PaymentAllocation(Base):
    """Portion of a payment applied to one due."""

    __tablename__ = "payment_allocations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    payment_id = Column(Integer, ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, index=True)
    due_id = Column(Integer, ForeignKey("student_dues.id", ondelete="SET NULL"), nullable=True)
    label = Column(String(120), nullable=True)
    category = Column(String(60), nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    payment = relationship("Payment", back_populates="allocations")
    due = relationship("StudentDue")
