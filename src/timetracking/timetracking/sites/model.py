from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Site:
    """Read model of a job site and its circular geofence."""

    site_id: str
    company_id: str
    name: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius_m: Optional[float] = None

    @property
    def has_geofence(self) -> bool:
        return self.latitude is not None and self.longitude is not None and bool(self.radius_m)
