"""Great-circle distance on a spherical earth."""

from __future__ import annotations

import math

import numpy as np

from banshee.constants import EARTH_RADIUS_M


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two GPS coordinates."""
    rlat1, rlon1 = math.radians(lat1), math.radians(lon1)
    rlat2, rlon2 = math.radians(lat2), math.radians(lon2)
    dlat = rlat2 - rlat1
    dlon = rlon2 - rlon1
    a = math.sin(dlat / 2) ** 2 + math.cos(rlat1) * math.cos(rlat2) * math.sin(dlon / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.asin(math.sqrt(min(a, 1.0)))


def haversine_np(
    lat1: np.ndarray | float,
    lon1: np.ndarray | float,
    lat2: np.ndarray | float,
    lon2: np.ndarray | float,
) -> np.ndarray:
    """Vectorised :func:`haversine` over numpy arrays (broadcasting applies).

    Returns
    -------
    Array of distances in meters with the broadcast shape of the inputs.
    """
    rlat1 = np.radians(lat1)
    rlat2 = np.radians(lat2)
    dlat = rlat2 - rlat1
    dlon = np.radians(lon2) - np.radians(lon1)
    a = np.sin(dlat / 2) ** 2 + np.cos(rlat1) * np.cos(rlat2) * np.sin(dlon / 2) ** 2
    return EARTH_RADIUS_M * 2 * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def segment_distances(lats: np.ndarray, lons: np.ndarray) -> np.ndarray:
    """Distance in meters between each pair of consecutive points.

    The result has one element fewer than the inputs (empty for < 2 points).
    """
    if len(lats) < 2:
        return np.zeros(0, dtype=float)
    return haversine_np(lats[:-1], lons[:-1], lats[1:], lons[1:])
