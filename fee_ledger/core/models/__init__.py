from fee_ledger.core.models.academic_year import AcademicYear
from fee_ledger.core.models.class_model import SchoolClass
from fee_ledger.core.models.student import Student
from fee_ledger.core.models.class_fee_structure import ClassFeeStructure
from fee_ledger.core.models.student_account import StudentAccount
from fee_ledger.core.models.student_due import StudentDue
from fee_ledger.core.models.payment import Payment
from fee_ledger.core.models.payment_allocation import PaymentAllocation
from fee_ledger.core.models.transport_fee import TransportFee

__all__ = [
    "AcademicYear",
    "SchoolClass",
    "Student",
    "ClassFeeStructure",
    "StudentAccount",
    "StudentDue",
    "Payment",
    "PaymentAllocation",
    "TransportFee",
]
