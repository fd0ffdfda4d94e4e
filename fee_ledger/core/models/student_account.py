"""Student account (ledger): one financial record scope per student per academic year."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import relationship

from fee_ledger.core.enums import AccountStatus, check_values
from fee_ledger.db.session import Base


class StudentAccount(Base):
    """
    At most one open account per (student, academic_year); enforced by a partial unique
    index so two concurrent opens cannot both insert.
    """

    __tablename__ = "student_accounts"
    __table_args__ = (
        CheckConstraint(f"status IN ({check_values(AccountStatus)})", name="chk_student_account_status"),
        Index(
            "uq_student_accounts_open_per_year",
            "student_id",
            "academic_year",
            unique=True,
            postgresql_where=text("status = 'open'"),
            sqlite_where=text("status = 'open'"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    ledger_number = Column(String(80), nullable=False, unique=True)
    status = Column(String(20), nullable=False, default=AccountStatus.open.value)
    academic_year = Column(String(20), nullable=False)
    opened_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    closed_at = Column(DateTime(timezone=True), nullable=True)

    student = relationship("Student")
