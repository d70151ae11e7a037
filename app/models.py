# ==============================================================================
# app/models.py
# ------------------------------------------------------------------------------
# Defines the in-memory records that flow through the calculation pipeline.
# Everything here is immutable and lives for a single calculation request.
# ==============================================================================

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class CanonicalDate:
    """A calendar day rendered as DD/MM/YYYY. Only ranges are checked."""
    day: int
    month: int
    year: int

    def __str__(self):
        return f"{self.day:02d}/{self.month:02d}/{self.year}"

    @property
    def sort_key(self):
        return (self.year, self.month, self.day)


@dataclass(frozen=True)
class AttendanceRecord:
    date: CanonicalDate
    marker: str


@dataclass(frozen=True)
class AttendanceSheet:
    """
    Attendance parsed from one sheet. `employees` keeps the column order of the
    sheet as (name, records) pairs; each employee has one record per date.
    """
    source: str
    employees: Tuple[Tuple[str, Tuple[AttendanceRecord, ...]], ...]
    dates: Tuple[CanonicalDate, ...]
    month: Optional[int]
    year: Optional[int]

    def employee_names(self):
        return [name for name, _ in self.employees]

    def records_for(self, name):
        for employee, records in self.employees:
            if employee == name:
                return records
        return ()


@dataclass(frozen=True)
class SalarySheet:
    source: str
    salaries: Tuple[Tuple[str, float], ...]

    def names(self):
        return [name for name, _ in self.salaries]

    def get(self, name, default=0.0):
        for employee, salary in self.salaries:
            if employee == name:
                return salary
        return default


@dataclass(frozen=True)
class SalesRecord:
    date: CanonicalDate
    cash: float
    card: float
    other: float
    online: float
    net_sales: float


@dataclass(frozen=True)
class SalesSheet:
    source: str
    records: Tuple[SalesRecord, ...]
    month: Optional[int]
    year: Optional[int]


@dataclass(frozen=True)
class RosterWarning:
    """Advisory message. `kind` is either 'warning' or 'info'."""
    kind: str
    message: str


@dataclass(frozen=True)
class ManualEntry:
    """An advance or bonus typed in by the user."""
    date: str
    amount: float


@dataclass(frozen=True)
class BreakdownEntry:
    date: CanonicalDate
    marker: str
    days: float
    type: str
    label: str


@dataclass(frozen=True)
class PayrollResult:
    name: str
    base_salary: float
    daily_rate: float
    days_in_month: int
    deduction_days: float
    addition_days: float
    attendance_deduction: float
    attendance_addition: float
    attendance_breakdown: Tuple[BreakdownEntry, ...]
    advances: Tuple[ManualEntry, ...]
    total_advances: float
    bonuses: Tuple[ManualEntry, ...]
    total_bonuses: float
    net_salary: float
    month: int
    year: int


@dataclass(frozen=True)
class SlabConfig:
    slab1_amount: float
    slab1_incentive: float
    slab2_amount: float
    slab2_incentive: float


@dataclass(frozen=True)
class IncentiveDailyResult:
    date: CanonicalDate
    net_sales: float
    slab_applied: str
    pool: float
    present_count: int
    per_person: float
    # (employee, amount) pairs in attendance-sheet column order
    employee_breakdown: Tuple[Tuple[str, float], ...]


@dataclass(frozen=True)
class IncentiveMonthlyResult:
    employee: str
    days_present: int
    total_incentive: float


@dataclass(frozen=True)
class IncentiveReport:
    daily: Tuple[IncentiveDailyResult, ...]
    monthly: Tuple[IncentiveMonthlyResult, ...]
    warnings: Tuple[RosterWarning, ...] = field(default_factory=tuple)
    employee_names: Tuple[str, ...] = field(default_factory=tuple)
