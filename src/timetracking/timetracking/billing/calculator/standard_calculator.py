from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ...core.constants import MONEY_QUANTUM, SECONDS_PER_HOUR
from ...core.exceptions import ClockSkewError
from .base import BillingCalculator, BillingResult


def _round_money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


class StandardBillingCalculator(BillingCalculator):
    """Standard rule: hours = round((out - in) / 3600, 2); amount = round(hours * rate, 2).

    The amount is billed on the already-rounded hours; a missing rate bills 0.
    """

    def compute(self, check_in_time: datetime, check_out_time: datetime, hourly_rate: Optional[Decimal]) -> BillingResult:
        if check_out_time < check_in_time:
            raise ClockSkewError(
                f"check-out time {check_out_time.isoformat()} precedes check-in time {check_in_time.isoformat()}"
            )

        elapsed = check_out_time - check_in_time
        seconds = Decimal(elapsed.days * 86400 + elapsed.seconds) + Decimal(elapsed.microseconds) / Decimal(1_000_000)
        duration_hours = _round_money(seconds / SECONDS_PER_HOUR)

        rate = Decimal(str(hourly_rate)) if hourly_rate is not None else Decimal(0)
        billable_amount = _round_money(duration_hours * rate)

        return BillingResult(duration_hours=duration_hours, billable_amount=billable_amount)
