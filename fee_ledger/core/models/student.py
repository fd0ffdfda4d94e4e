from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from fee_ledger.db.session import Base


class Student(Base):
    """
    Roster student. Read-only from the ledger's point of view, except account_opened,
    a convenience flag set after a ledger account is first opened.
    """

    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    admission_number = Column(String(50), nullable=True, unique=True)
    admission_date = Column(Date, nullable=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    is_hosteller = Column(Boolean, nullable=False, default=False)
    guardian_name = Column(String(255), nullable=True)
    guardian_phone = Column(String(30), nullable=True)
    status = Column(String(20), nullable=False, default="active")
    account_opened = Column(Boolean, nullable=False, default=False)

    school_class = relationship("SchoolClass")
