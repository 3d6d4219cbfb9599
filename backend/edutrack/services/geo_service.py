"""GPS verification service."""
import logging
import math
from dataclasses import dataclass
from numbers import Real
from typing import Tuple

from edutrack.services.exceptions import GeolocationUnavailable, LocationRejected

logger = logging.getLogger(__name__)

EARTH_RADIUS_METERS = 6371000
DEFAULT_RADIUS_METERS = 50

Coordinates = Tuple[float, float]


@dataclass(frozen=True)
class GeoVerification:
    """Outcome of a location check."""
    accepted: bool
    distance: float
    radius: float


class GeoVerifier:
    """Decides whether a reported device location is close enough to an anchor."""

    def __init__(self, max_radius_meters: float = DEFAULT_RADIUS_METERS):
        self.max_radius_meters = max_radius_meters

    @staticmethod
    def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate distance between two GPS points in meters."""
        lat1_rad = math.radians(lat1)
        lat2_rad = math.radians(lat2)
        delta_lat = math.radians(lat2 - lat1)
        delta_lon = math.radians(lon2 - lon1)

        a = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lon / 2) ** 2)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return EARTH_RADIUS_METERS * c

    @staticmethod
    def validate_coordinates(latitude, longitude) -> Coordinates:
        """Return the pair as floats or raise GeolocationUnavailable."""
        for value in (latitude, longitude):
            if isinstance(value, bool) or not isinstance(value, Real):
                raise GeolocationUnavailable()
            if not math.isfinite(value):
                raise GeolocationUnavailable()

        if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
            raise GeolocationUnavailable('Location coordinates out of range')

        return float(latitude), float(longitude)

    def verify(self, anchor: Coordinates, reported: Coordinates, max_radius_meters: float = None) -> GeoVerification:
        """Compare ``reported`` against ``anchor``; accepted when distance <= radius."""
        radius = self.max_radius_meters if max_radius_meters is None else max_radius_meters
        anchor_lat, anchor_lng = self.validate_coordinates(*anchor)
        reported_lat, reported_lng = self.validate_coordinates(*reported)

        distance = self.calculate_distance(anchor_lat, anchor_lng, reported_lat, reported_lng)

        return GeoVerification(accepted=distance <= radius, distance=distance, radius=radius)

    def require_within(self, anchor: Coordinates, reported: Coordinates, max_radius_meters: float = None) -> GeoVerification:
        """Like verify() but raises LocationRejected when outside the radius."""
        result = self.verify(anchor, reported, max_radius_meters)
        if not result.accepted:
            logger.info(
                'Location rejected: %.2f m from anchor %s (radius %s m)',
                result.distance, anchor, result.radius
            )
            raise LocationRejected(result.distance, result.radius)
        return result
