"""Statutory rates and payroll defaults."""
from decimal import Decimal

STANDARD_HOURS_PER_DAY = Decimal("8")
OVERTIME_MULTIPLIER = Decimal("1.5")

PF_RATE = Decimal("0.12")
PF_CAP = Decimal("1800")

ESI_RATE = Decimal("0.0075")
ESI_GROSS_THRESHOLD = Decimal("21000")

# (upper bound of annual income, marginal rate); None means no upper bound
TAX_BRACKETS = [
    (Decimal("250000"), Decimal("0")),
    (Decimal("500000"), Decimal("0.05")),
    (Decimal("1000000"), Decimal("0.20")),
    (None, Decimal("0.30")),
]

MONEY_QUANT = Decimal("0.01")
DAYS_QUANT = Decimal("0.1")

ALLOWANCE_KEYS = ("house", "transport", "medical", "food", "other")
CONFIG_DEDUCTION_KEYS = ("professional", "other")
