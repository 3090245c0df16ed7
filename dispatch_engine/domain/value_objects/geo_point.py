"""GeoPoint value object — an immutable WGS84 coordinate."""

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        """True when both coordinates are finite and inside geographic ranges."""
        return (
            math.isfinite(self.latitude)
            and math.isfinite(self.longitude)
            and -90.0 <= self.latitude <= 90.0
            and -180.0 <= self.longitude <= 180.0
        )

    def haversine_km(self, other: "GeoPoint") -> float:
        """Great-circle distance to `other` in kilometres."""
        phi1, phi2 = math.radians(self.latitude), math.radians(other.latitude)
        d_phi = phi2 - phi1
        d_lambda = math.radians(other.longitude - self.longitude)

        h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
        # float error can push h a hair above 1 for antipodal points
        return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))
