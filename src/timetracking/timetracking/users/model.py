from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Worker:
    """Read model of a user profile for billing.

    ``hourly_rate`` is the profile's current rate; sessions keep their own
    snapshot taken at check-in.
    """

    worker_id: str
    company_id: str
    hourly_rate: Optional[Decimal] = None
