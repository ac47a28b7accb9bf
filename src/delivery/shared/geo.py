"""Geographic helpers: GeoPoint value object and straight-line delivery estimates.

Distances are great-circle (Haversine) distances on a spherical Earth. Travel
times divide that distance by an assumed average speed for the travel mode, so
they are coarse placeholders for a routing provider: road distance is never
consulted. Callers depend only on the function signatures, which lets a real
router replace the estimate later.
"""

import math
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float

from delivery.domain import delivery

EARTH_RADIUS_KM = 6371.0


class TravelMode(Enum):
    WALKING = "walking"
    BICYCLING = "bicycling"
    DRIVING = "driving"


# Average speeds in km/h
TRAVEL_SPEEDS_KMH = {
    TravelMode.WALKING: 5.0,
    TravelMode.BICYCLING: 15.0,
    TravelMode.DRIVING: 30.0,  # Urban driving average
}

DEFAULT_TRAVEL_MODE = TravelMode.DRIVING


def haversine_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two points given in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push `a` just outside [0, 1] for antipodal points
    a = min(1.0, max(0.0, a))

    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def resolve_travel_mode(mode: str | TravelMode | None) -> TravelMode:
    """The TravelMode for ``mode``; unknown or missing modes fall back to driving."""
    try:
        return TravelMode(mode)
    except ValueError:
        return DEFAULT_TRAVEL_MODE


def travel_speed_kmh(mode: str | TravelMode | None) -> float:
    """Assumed average speed in km/h for a travel mode."""
    return TRAVEL_SPEEDS_KMH[resolve_travel_mode(mode)]


def estimate_travel_time_minutes(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    mode: str | TravelMode = DEFAULT_TRAVEL_MODE,
) -> int:
    """Estimated travel time in whole minutes along the straight line between two points."""
    distance = haversine_distance_km(lat1, lon1, lat2, lon2)
    minutes = distance / travel_speed_kmh(mode) * 60
    # Half-minutes round up
    return int(math.floor(minutes + 0.5))


@delivery.value_object
class GeoPoint:
    """Latitude/longitude pair in degrees.

    Both coordinates are required. Latitude ranges from -90 to 90, longitude
    from -180 to 180.
    """

    latitude = Float(min_value=-90.0, max_value=90.0)
    longitude = Float(min_value=-180.0, max_value=180.0)

    @invariant.post
    def both_coordinates_required(self):
        if self.latitude is None or self.longitude is None:
            raise ValidationError({"coordinates": ["Both latitude and longitude are required"]})

    def distance_to(self, other: "GeoPoint") -> float:
        return haversine_distance_km(self.latitude, self.longitude, other.latitude, other.longitude)

    def travel_time_to(self, other: "GeoPoint", mode: str | TravelMode = DEFAULT_TRAVEL_MODE) -> int:
        return estimate_travel_time_minutes(self.latitude, self.longitude, other.latitude, other.longitude, mode)
