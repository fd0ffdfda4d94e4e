"""Class fee structure: structured fee component set per class per academic year."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from fee_ledger.db.session import Base

# Order matters: it is the order one-time dues are seeded in.
COMPONENT_FIELDS = ("admission", "uniform", "hostel_dress", "copy", "book", "monthly")


def _amount_column():
    return Column(Numeric(10, 2), nullable=False, default=0)


class ClassFeeStructure(Base):
    """
    Fee amounts for one class and academic year, one column per component and tier
    (resident = hosteller, non_resident = day scholar).
    """

    __tablename__ = "class_fee_structures"
    __table_args__ = (
        UniqueConstraint("class_id", "academic_year", name="uq_class_fee_structure_class_year"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    academic_year = Column(String(20), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    resident_admission = _amount_column()
    resident_uniform = _amount_column()
    resident_hostel_dress = _amount_column()
    resident_copy = _amount_column()
    resident_book = _amount_column()
    resident_monthly = _amount_column()

    non_resident_admission = _amount_column()
    non_resident_uniform = _amount_column()
    non_resident_hostel_dress = _amount_column()
    non_resident_copy = _amount_column()
    non_resident_book = _amount_column()
    non_resident_monthly = _amount_column()

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    school_class = relationship("SchoolClass")

    def components(self, tier: str) -> dict:
        return {name: getattr(self, f"{tier}_{name}") for name in COMPONENT_FIELDS}

    def set_components(self, tier: str, values: dict) -> None:
        for name in COMPONENT_FIELDS:
            setattr(self, f"{tier}_{name}", values.get(name) or 0)
