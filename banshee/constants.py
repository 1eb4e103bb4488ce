"""Unit conversions and tolerances shared by the banshee engines."""

from __future__ import annotations

# Mean earth radius in meters (spherical model used by the haversine formula)
EARTH_RADIUS_M: float = 6_371_000.0

# Time conversion: milliseconds
MS_PER_SECOND: int = 1_000
MS_PER_MINUTE: int = 60_000
MS_PER_HOUR: int = 3_600_000

# Distance conversion
METERS_PER_KM: float = 1_000.0

# Two milestone distances closer than this are treated as the same ledger key
MILESTONE_KEY_TOLERANCE_M: float = 1.0
