"""
Academic year arithmetic. A year code looks like "2024-25": it starts on the first day of
the configured start month (April by default) and runs for twelve months.
"""

import re
from datetime import date, timedelta
from typing import List, Optional, Tuple

from fee_ledger.core.config import settings

_CODE_RE = re.compile(r"(\d{4})\D*(\d{2,4})")


class AcademicYearCalendar:
    def __init__(self, start_month: Optional[int] = None) -> None:
        self.start_month = start_month or settings.academic_year_start_month

    def current_year(self, reference: Optional[date] = None) -> str:
        """Code of the academic year containing ``reference`` (default: today)."""
        reference = reference or date.today()
        start_year = reference.year if reference.month >= self.start_month else reference.year - 1
        return self.format_code(start_year)

    @staticmethod
    def format_code(start_year: int) -> str:
        return f"{start_year}-{str(start_year + 1)[-2:]}"

    def parse(self, code: Optional[str]) -> Tuple[int, int]:
        """
        Return (start_year, end_year) for a code. Accepts "2024-25", "2024-2025", "2024/25".
        Never raises: anything unparseable falls back to the current calendar year.
        """
        match = _CODE_RE.search(code or "")
        if not match:
            year = date.today().year
            return year, year + 1
        start_year = int(match.group(1))
        raw_end = match.group(2)
        if len(raw_end) == 2:
            end_year = int(str(start_year + 1)[:2] + raw_end)
        else:
            end_year = int(raw_end)
        return start_year, end_year

    def is_valid(self, code: Optional[str]) -> bool:
        match = _CODE_RE.fullmatch((code or "").strip())
        if not match:
            return False
        start_year, end_year = self.parse(code)
        return end_year == start_year + 1

    def months_of(self, code: Optional[str]) -> List[str]:
        """The twelve YYYY-MM keys of the academic year in chronological order."""
        start_year, end_year = self.parse(code)
        months = [f"{start_year}-{month:02d}" for month in range(self.start_month, 13)]
        months += [f"{end_year}-{month:02d}" for month in range(1, self.start_month)]
        return months

    def bounds(self, code: Optional[str]) -> Tuple[date, date]:
        """First and last calendar day of the academic year."""
        start_year, _ = self.parse(code)
        start = date(start_year, self.start_month, 1)
        end = date(start_year + 1, self.start_month, 1) - timedelta(days=1)
        return start, end

    def months_between(self, code: Optional[str], start: date, end: Optional[date] = None) -> List[str]:
        """Months of the year from start's month through end's month; no end runs to the year's close."""
        first = f"{start.year}-{start.month:02d}"
        last = f"{end.year}-{end.month:02d}" if end else None
        return [m for m in self.months_of(code) if m >= first and (last is None or m <= last)]
