"""Human-readable labels for dues, used on allocations, summaries and receipts."""

import calendar
from typing import Optional

from fee_ledger.core.enums import ItemType

ITEM_LABELS = {
    ItemType.admission: "Admission Fee",
    ItemType.registration: "Registration Fee",
    ItemType.uniform: "Uniform",
    ItemType.copy: "Copy",
    ItemType.book: "Books",
    ItemType.hostel_dress: "Hostel Dress",
    ItemType.monthly: "Monthly Fee",
    ItemType.transport: "Transport Fee",
    ItemType.misc: "Miscellaneous",
}


def format_due_month(due_month: Optional[str]) -> Optional[str]:
    """'2025-03' -> 'Mar 2025'. Returns the raw value if it is not a YYYY-MM key."""
    if not due_month:
        return None
    year, _, month = due_month.partition("-")
    if not (year.isdigit() and month.isdigit() and 1 <= int(month) <= 12):
        return due_month
    return f"{calendar.month_abbr[int(month)]} {year}"


def due_label(item_type, due_month: Optional[str] = None, notes: Optional[str] = None) -> str:
    item = ItemType(item_type)
    if item is ItemType.misc:
        return (notes or "").strip() or ITEM_LABELS[item]
    if item is ItemType.transport:
        route = (notes or "").strip()
        label = f"{ITEM_LABELS[item]}: {route}" if route else ITEM_LABELS[item]
        month = format_due_month(due_month)
        return f"{label} ({month})" if month else label
    if item is ItemType.monthly:
        month = format_due_month(due_month)
        return f"{ITEM_LABELS[item]} ({month})" if month else ITEM_LABELS[item]
    return ITEM_LABELS[item]
