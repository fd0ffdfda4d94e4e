from sqlalchemy import Boolean, Column, Integer, String

from fee_ledger.db.session import Base


class SchoolClass(Base):
    """Roster class. Owned by the roster directory; the ledger only reads it."""

    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    section = Column(String(20), nullable=True)
    track = Column(String(50), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
