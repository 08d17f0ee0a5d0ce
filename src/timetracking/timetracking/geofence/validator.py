"""Geofence validation for check-ins.

A site's geofence is a circle (center + radius in meters). A worker position is
accepted when its great-circle distance to the center, reduced by the reported
GPS accuracy, stays within the radius plus a fixed grace buffer.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..core.constants import EARTH_RADIUS_METERS, GEOFENCE_BUFFER_METERS


@dataclass(frozen=True)
class GeofenceResult:
    accepted: bool
    distance_meters: Optional[float]
    effective_distance_meters: Optional[float] = None
    allowed_radius_meters: Optional[float] = None

    @property
    def skipped(self) -> bool:
        return self.distance_meters is None


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates, in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) *
         math.sin(delta_lambda / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def validate_geofence(
    worker_lat: float,
    worker_lon: float,
    site_lat: Optional[float],
    site_lon: Optional[float],
    site_radius_m: Optional[float],
    gps_accuracy_m: Optional[float] = None,
) -> GeofenceResult:
    """Accept or reject a worker position against a site geofence.

    A site without full geofence data (center and radius) is not checked and
    the position is accepted. A positive ``gps_accuracy_m`` is subtracted from
    the measured distance, never below zero.
    """
    if site_lat is None or site_lon is None or not site_radius_m:
        return GeofenceResult(accepted=True, distance_meters=None)

    distance = haversine_distance(worker_lat, worker_lon, float(site_lat), float(site_lon))
    effective = distance
    if gps_accuracy_m:
        effective = max(distance - float(gps_accuracy_m), 0.0)

    allowed = float(site_radius_m) + GEOFENCE_BUFFER_METERS
    return GeofenceResult(
        accepted=effective <= allowed,
        distance_meters=distance,
        effective_distance_meters=effective,
        allowed_radius_meters=allowed,
    )
