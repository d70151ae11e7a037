# ==============================================================================
# app/calculator/schema.py
# ------------------------------------------------------------------------------
# Defines the expected shape of the uploaded sheets and the business constants
# the calculators apply. This module is the single source of truth for the
# detector, the normalizers and the validators.
# ==============================================================================

# Number of leading rows searched for a header row.
HEADER_SCAN_ROWS = 10

EXPECTED_SHEETS = {
    'attendance': {
        # Header row: Day, Date, <employee>, <employee>, ...
        'header_keywords': ['day', 'date'],
        'first_employee_column': 2,
        'date_column': 1,
    },
    'incentive_attendance': {
        # Header row: Date, <employee>, <employee>, ...
        'header_keywords': ['date'],
        'first_employee_column': 1,
        'date_column': 0,
    },
    'salary': {
        'header_keywords': ['name', 'salary'],
    },
    'sales': {
        'required_columns': ['date', 'cash', 'card', 'other', 'online'],
        'numeric_columns': ['cash', 'card', 'other', 'online'],
        'skip_row_keywords': ['total', 'sub'],
    },
}

# Header cells made only of x's are placeholders for unfilled employee slots.
PLACEHOLDER_PATTERN = r'^x+$'

# Blank attendance cells count as a leave day.
DEFAULT_MARKER = 'A'

# Only this marker counts an employee as present for the incentive pool.
INCENTIVE_PRESENT_MARKER = 'P'

ATTENDANCE_MARKERS = {
    'P': {'label': 'Present', 'days': 0, 'type': 'neutral'},
    'A': {'label': 'Leave/Absent', 'days': 1, 'type': 'deduction'},
    'X': {'label': 'Week Off', 'days': 0, 'type': 'neutral'},
    'H': {'label': 'Half Day', 'days': 0.5, 'type': 'deduction'},
    'W': {'label': 'Weekend worked', 'days': 2, 'type': 'deduction'},
    'N': {'label': 'No Show', 'days': 1.5, 'type': 'deduction'},
    'O': {'label': 'Overtime', 'days': 1, 'type': 'addition'},
}

# Online revenue only counts at 40% toward incentive-eligible sales.
ONLINE_SALES_FACTOR = 0.4

SLAB_FIELDS = {
    'slab1_amount': 'Slab 1 Amount',
    'slab1_incentive': 'Slab 1 Incentive',
    'slab2_amount': 'Slab 2 Amount',
    'slab2_incentive': 'Slab 2 Incentive',
}

SLAB_LABELS = {
    'none': 'None',
    'slab1': 'Slab 1',
    'slab2': 'Slab 2',
}

ALLOWED_EXTENSIONS = {'.csv', '.xlsx', '.xls'}

MAX_UPLOAD_BYTES = 10 * 1024 * 1024

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December'
]
