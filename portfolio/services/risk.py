# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Risk classification from budget and planned duration.

Both axes fall into one of three bands; the project is HIGH risk if either
band is high, LOW only if both are low, MEDIUM otherwise.
"""

from datetime import date
from decimal import Decimal

from portfolio.models.domain import RiskClassification

LOW_BUDGET_LIMIT = Decimal("100000")
MID_BUDGET_LIMIT = Decimal("500000")
LOW_DURATION_MONTHS = 3
MID_DURATION_MONTHS = 6

_LOW, _MID, _HIGH = 0, 1, 2


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end``, truncated toward zero.

    2024-01-31 -> 2024-02-29 is 0 months; 2024-01-15 -> 2024-04-15 is 3.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    day_delta = end.day - start.day
    if months > 0 and day_delta < 0:
        months -= 1
    elif months < 0 and day_delta > 0:
        months += 1
    return months


def _budget_band(budget: Decimal) -> int:
    if budget <= LOW_BUDGET_LIMIT:
        return _LOW
    if LOW_BUDGET_LIMIT < budget <= MID_BUDGET_LIMIT:
        return _MID
    if budget > MID_BUDGET_LIMIT:
        return _HIGH
    raise AssertionError(f"budget {budget!r} matched no risk band")


def _duration_band(months: int) -> int:
    if months <= LOW_DURATION_MONTHS:
        return _LOW
    if LOW_DURATION_MONTHS < months <= MID_DURATION_MONTHS:
        return _MID
    if months > MID_DURATION_MONTHS:
        return _HIGH
    raise AssertionError(f"duration {months!r} months matched no risk band")


def classify(budget, start_date: date, expected_end_date: date) -> RiskClassification:
    budget_band = _budget_band(Decimal(str(budget)))
    duration_band = _duration_band(months_between(start_date, expected_end_date))

    if _HIGH in (budget_band, duration_band):
        return RiskClassification.HIGH
    if budget_band == _LOW and duration_band == _LOW:
        return RiskClassification.LOW
    return RiskClassification.MEDIUM
