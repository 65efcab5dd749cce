# File: backend/geoattend/services/geo_service.py
"""Geofence distance checks."""
import math
from typing import Dict

class GeoService:
    """Great-circle distance and radius membership."""

    EARTH_RADIUS_M = 6371000

    @staticmethod
    def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Haversine distance between two points in meters.

        Inputs are not range-checked; out-of-range values give NaN or
        meaningless results, so validate coordinates before calling.
        """
        R = GeoService.EARTH_RADIUS_M

        lat1_rad = math.radians(lat1)
        lat2_rad = math.radians(lat2)
        delta_lat = math.radians(lat2 - lat1)
        delta_lon = math.radians(lon2 - lon1)

        a = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lon / 2) ** 2)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return R * c

    @staticmethod
    def covers(distance: float, radius_m: float) -> bool:
        """The boundary is inclusive: a point exactly ``radius_m`` away is inside."""
        return distance <= radius_m

    @staticmethod
    def is_within_radius(
        center_lat: float,
        center_lng: float,
        point_lat: float,
        point_lng: float,
        radius_m: float
    ) -> bool:
        distance = GeoService.calculate_distance(center_lat, center_lng, point_lat, point_lng)
        return GeoService.covers(distance, radius_m)

    @staticmethod
    def verify_location(point_lat: float, point_lng: float, session) -> Dict:
        """Check a submission point against a session's anchor and radius."""
        distance = GeoService.calculate_distance(
            session.lat, session.lng, point_lat, point_lng
        )

        return {
            'is_inside': GeoService.covers(distance, session.radius_m),
            'distance': distance,
            'required_radius': session.radius_m,
            'session_location': {
                'lat': session.lat,
                'lng': session.lng
            }
        }
