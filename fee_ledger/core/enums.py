from enum import Enum


class AccountStatus(str, Enum):
    open = "open"
    closed = "closed"


class DueType(str, Enum):
    one_time = "one_time"
    monthly = "monthly"


class ItemType(str, Enum):
    admission = "admission"
    registration = "registration"
    uniform = "uniform"
    copy = "copy"
    book = "book"
    hostel_dress = "hostel_dress"
    monthly = "monthly"
    transport = "transport"
    misc = "misc"


class DueStatus(str, Enum):
    due = "due"
    partial = "partial"
    paid = "paid"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"
    partial = "partial"


class PaymentMethod(str, Enum):
    cash = "cash"
    upi = "upi"
    bank = "bank"
    bank_transfer = "bank_transfer"
    cheque = "cheque"
    online = "online"


def check_values(enum_cls) -> str:
    """Render enum values for a SQL ``IN (...)`` check constraint."""
    return ",".join(f"'{member.value}'" for member in enum_cls)
