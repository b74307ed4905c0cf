"""Statutory rates and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Employee-side payroll deductions and employer-side invoice surcharges use
different PF/ESIC rates and must stay separate.
"""

from decimal import Decimal

# Employee payroll deductions
EPF_EMPLOYEE_RATE = Decimal("0.12")
ESIC_EMPLOYEE_RATE = Decimal("0.0075")

# Employer statutory surcharges billed on the invoice
PF_RATE = Decimal("0.13")
ESIC_RATE = Decimal("0.0325")

CGST_RATE = Decimal("0.09")
SGST_RATE = Decimal("0.09")
IGST_RATE = Decimal("0.18")

# Last 4 working days of a month are overtime-eligible
OVERTIME_THRESHOLD_OFFSET = 4

DEFAULT_PER_DAY_RATE = Decimal("466")
DEFAULT_SERVICE_CHARGE_RATE = Decimal("7")
DEFAULT_BONUS_RATE = Decimal("0")
DEFAULT_OVERTIME_RATE = Decimal("1.5")

DEFAULT_INVOICE_DUE_DAYS = 30
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 200
MAX_NOTES_LENGTH = 1000
