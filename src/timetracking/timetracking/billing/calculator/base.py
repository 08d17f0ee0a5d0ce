from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class BillingResult:
    duration_hours: Decimal
    billable_amount: Decimal


class BillingCalculator(ABC):
    """Calculator interface (Strategy Pattern for billing)."""

    @abstractmethod
    def compute(self, check_in_time: datetime, check_out_time: datetime, hourly_rate: Optional[Decimal]) -> BillingResult:
        raise NotImplementedError
