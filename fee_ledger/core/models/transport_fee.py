"""Transport fee: a student's bus route subscription, billed monthly for an academic year."""

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from fee_ledger.db.session import Base


class TransportFee(Base):
    """
    Each active row becomes one transport due per month of the academic year that falls
    between start_date and end_date (open-ended when end_date is null).
    """

    __tablename__ = "transport_fees"
    __table_args__ = (
        CheckConstraint("monthly_amount > 0", name="chk_transport_fee_amount_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    route_name = Column(String(100), nullable=False)
    monthly_amount = Column(Numeric(10, 2), nullable=False)
    academic_year = Column(String(20), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    student = relationship("Student")
