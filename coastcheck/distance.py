"""Great-circle distance, min-reduction and input validation."""
from __future__ import annotations

import math
import numbers
from typing import Tuple

import numpy as np

from .config import EARTH_RADIUS_M
from .errors import InvalidInputError, NoDataError


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points, in metres."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = phi2 - phi1
    dlam = math.radians(lon2) - math.radians(lon1)
    a = math.sin(dphi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2.0) ** 2
    return 2.0 * math.asin(math.sqrt(min(1.0, a))) * EARTH_RADIUS_M


def haversine_m_many(lat: float, lon: float, lats: np.ndarray, lons: np.ndarray) -> np.ndarray:
    """Vectorized haversine from one point to many, in metres."""
    lat_r = np.radians(lat)
    lats_r = np.radians(lats)
    dlat = lats_r - lat_r
    dlon = np.radians(lons) - np.radians(lon)
    a = np.sin(dlat / 2.0) ** 2 + np.cos(lat_r) * np.cos(lats_r) * np.sin(dlon / 2.0) ** 2
    return 2.0 * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0))) * EARTH_RADIUS_M


def min_reduce(distances: np.ndarray) -> Tuple[int, float]:
    """
    Index and value of the smallest distance.

    np.argmin returns the first occurrence, so ties go to the earliest vertex.

    Raises:
        NoDataError: if there is nothing to reduce
    """
    if distances.size == 0:
        raise NoDataError("No coastline vertices to measure against")
    idx = int(np.argmin(distances))
    return idx, float(distances[idx])


def _require_real(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidInputError(f"{name} must be a real number, got {type(value).__name__}")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be finite, got {value}")
    return value


def validate_point(lat, lon) -> Tuple[float, float]:
    lat = _require_real("latitude", lat)
    lon = _require_real("longitude", lon)
    if not -90.0 <= lat <= 90.0:
        raise InvalidInputError(f"latitude out of range [-90, 90]: {lat}")
    if not -180.0 <= lon <= 180.0:
        raise InvalidInputError(f"longitude out of range [-180, 180]: {lon}")
    return lat, lon


def validate_threshold(threshold_m) -> float:
    threshold_m = _require_real("threshold_m", threshold_m)
    if threshold_m < 0:
        raise InvalidInputError(f"threshold_m must be non-negative, got {threshold_m}")
    return threshold_m


def _wrap_lon(dlon: np.ndarray) -> np.ndarray:
    return (dlon + 180.0) % 360.0 - 180.0


def nearest_on_segments(
    lat: float,
    lon: float,
    vertices: np.ndarray,
    ring_ids: np.ndarray,
) -> np.ndarray:
    """
    Nearest point on every ring edge to (lat, lon).

    Edges are projected onto a local equirectangular plane centred on the
    query point, where the closest-point parameter t is solved exactly. The
    projection is affine in (dlon, dlat), so the same t applied in degree
    space gives the candidate's lon/lat.

    Args:
        lat, lon: query point in degrees
        vertices: (N, 2) array of (lon, lat)
        ring_ids: (N,) ring ordinal per vertex

    Returns:
        (M, 2) array of (lon, lat) candidates, one per edge, in ring order
    """
    if len(vertices) < 2:
        return np.empty((0, 2), dtype=np.float64)

    same_ring = ring_ids[:-1] == ring_ids[1:]
    a = vertices[:-1][same_ring]
    b = vertices[1:][same_ring]
    if len(a) == 0:
        return np.empty((0, 2), dtype=np.float64)

    kx = math.cos(math.radians(lat))
    seg_dlon = _wrap_lon(b[:, 0] - a[:, 0])
    seg_dlat = b[:, 1] - a[:, 1]

    ax = kx * _wrap_lon(a[:, 0] - lon)
    ay = a[:, 1] - lat
    dx = kx * seg_dlon
    dy = seg_dlat

    length_sq = dx * dx + dy * dy
    with np.errstate(invalid="ignore", divide="ignore"):
        t = np.where(length_sq > 0.0, -(ax * dx + ay * dy) / length_sq, 0.0)
    t = np.clip(t, 0.0, 1.0)

    c_lon = a[:, 0] + t * seg_dlon
    c_lon = np.where(np.abs(c_lon) > 180.0, _wrap_lon(c_lon), c_lon)
    c_lat = a[:, 1] + t * seg_dlat
    return np.column_stack([c_lon, c_lat])
