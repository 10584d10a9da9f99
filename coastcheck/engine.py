"""
Nearest-coastline queries over an in-memory CoastlineDataset.

The engine never mutates its dataset, so one instance can serve any number
of concurrent callers without locking.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd
import geopandas as gpd

from . import config
from .dataset import CoastlineDataset
from .distance import (
    haversine_m_many,
    min_reduce,
    nearest_on_segments,
    validate_point,
    validate_threshold,
)
from .errors import InvalidInputError, NoDataError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProximityResult:
    is_near: bool
    min_distance_m: float
    closest_point: Tuple[float, float]  # (lon, lat)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isNear": self.is_near,
            "minDistanceMeters": self.min_distance_m,
            "closestPoint": [self.closest_point[0], self.closest_point[1]],
        }


class CoastProximityEngine:
    """
    Answers "how close is this point to the coast" from static geometry.

    Args:
        dataset: loaded coastline dataset
        workers: number of contiguous shards for the vertex scan. Shards are
            combined in order, so results match the single-threaded scan.
        default_threshold_m: "near" radius used when a query passes none
    """

    def __init__(
        self,
        dataset: CoastlineDataset,
        workers: int = 1,
        default_threshold_m: float = config.DEFAULT_THRESHOLD_M,
    ):
        if workers < 1:
            raise InvalidInputError(f"workers must be >= 1, got {workers}")
        self.dataset = dataset
        self.workers = int(workers)
        self.default_threshold_m = validate_threshold(default_threshold_m)

    @classmethod
    def from_path(cls, path, **kwargs) -> "CoastProximityEngine":
        return cls(CoastlineDataset.load(path), **kwargs)

    @classmethod
    def from_geojson(cls, obj: Any, **kwargs) -> "CoastProximityEngine":
        return cls(CoastlineDataset.from_geojson(obj), **kwargs)

    def _threshold(self, threshold_m: Optional[float]) -> float:
        if threshold_m is None:
            return self.default_threshold_m
        return validate_threshold(threshold_m)

    # -----------------------
    # Scans
    # -----------------------
    def _scan(self, lat: float, lon: float, points: np.ndarray) -> Tuple[int, float]:
        """First-minimum haversine scan over an (N, 2) lon/lat array."""
        if self.workers == 1 or len(points) < 2 * self.workers:
            return min_reduce(haversine_m_many(lat, lon, points[:, 1], points[:, 0]))

        bounds = np.linspace(0, len(points), self.workers + 1).astype(int)
        shards = [(int(lo), int(hi)) for lo, hi in zip(bounds[:-1], bounds[1:]) if hi > lo]

        def _shard(span):
            lo, hi = span
            idx, d = min_reduce(haversine_m_many(lat, lon, points[lo:hi, 1], points[lo:hi, 0]))
            return lo + idx, d

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            partials = list(pool.map(_shard, shards))

        # strict < keeps the earliest shard on ties
        best_idx, best_d = partials[0]
        for idx, d in partials[1:]:
            if d < best_d:
                best_idx, best_d = idx, d
        return best_idx, best_d

    def _closest_vertex(self, lat: float, lon: float) -> Tuple[Tuple[float, float], float]:
        vertices = self.dataset.vertices
        if len(vertices) == 0:
            raise NoDataError(
                f"Coastline dataset {self.dataset.source or '<memory>'} has no boundary vertices"
            )
        idx, d = self._scan(lat, lon, vertices)
        return (float(vertices[idx, 0]), float(vertices[idx, 1])), d

    def _closest_on_segment(self, lat: float, lon: float) -> Tuple[Tuple[float, float], float]:
        point, d = self._closest_vertex(lat, lon)
        candidates = nearest_on_segments(lat, lon, self.dataset.vertices, self.dataset.ring_ids)
        if len(candidates) == 0:
            return point, d
        idx, seg_d = self._scan(lat, lon, candidates)
        if seg_d < d:
            return (float(candidates[idx, 0]), float(candidates[idx, 1])), seg_d
        return point, d

    # -----------------------
    # Public API
    # -----------------------
    def find_closest_coast_point(
        self,
        latitude: float,
        longitude: float,
        threshold_m: Optional[float] = None,
        mode: str = config.DEFAULT_MODE,
    ) -> ProximityResult:
        """
        Nearest coastline point to (latitude, longitude).

        Args:
            latitude: degrees in [-90, 90]
            longitude: degrees in [-180, 180]
            threshold_m: "near" radius in metres; None uses the engine default
            mode: "vertex" measures to the nearest ring vertex; "segment" to
                the nearest point on any ring edge

        Returns:
            ProximityResult with is_near = min_distance_m <= threshold_m

        Raises:
            InvalidInputError: bad coordinates, threshold or mode
            NoDataError: the dataset has no boundary vertices
        """
        lat, lon = validate_point(latitude, longitude)
        threshold_m = self._threshold(threshold_m)
        if mode not in config.DISTANCE_MODES:
            raise InvalidInputError(f"mode must be one of {config.DISTANCE_MODES}, got {mode!r}")

        if mode == "segment":
            closest, min_d = self._closest_on_segment(lat, lon)
        else:
            closest, min_d = self._closest_vertex(lat, lon)

        logger.debug(f"Closest coast point to [{lon}, {lat}]: {list(closest)} at {min_d:.2f} m ({mode})")
        return ProximityResult(
            is_near=bool(min_d <= threshold_m),
            min_distance_m=min_d,
            closest_point=closest,
        )

    def classify_points(
        self,
        frame: Union[pd.DataFrame, gpd.GeoDataFrame],
        lat_col: str = "lat",
        lon_col: str = "lon",
        threshold_m: Optional[float] = None,
        mode: str = config.DEFAULT_MODE,
    ) -> pd.DataFrame:
        """
        Annotate a table of visit locations with coastline proximity.

        Point GeoDataFrames without lat/lon columns are read from their
        geometry (reprojected to EPSG:4326). Any invalid row fails the whole
        call; rows are never silently dropped.

        Returns:
            Copy of frame with is_near, coast_distance_m, coast_lon, coast_lat
        """
        lats, lons = _frame_coordinates(frame, lat_col, lon_col)
        threshold_m = self._threshold(threshold_m)

        results: List[ProximityResult] = []
        for i, (lat, lon) in enumerate(zip(lats, lons)):
            try:
                results.append(self.find_closest_coast_point(lat, lon, threshold_m, mode))
            except InvalidInputError as e:
                raise InvalidInputError(f"Row {frame.index[i]!r}: {e}") from e

        out = frame.copy()
        out[config.NEAR_COL] = pd.Series([r.is_near for r in results], index=frame.index, dtype="bool")
        out[config.DISTANCE_COL] = pd.Series([r.min_distance_m for r in results], index=frame.index, dtype="float64")
        out[config.COAST_LON_COL] = pd.Series([r.closest_point[0] for r in results], index=frame.index, dtype="float64")
        out[config.COAST_LAT_COL] = pd.Series([r.closest_point[1] for r in results], index=frame.index, dtype="float64")

        if len(out):
            logger.info(f"Classified {len(out)} points: {int(out[config.NEAR_COL].sum())} within {threshold_m:.0f} m of the coast")
        return out


def _frame_coordinates(frame, lat_col: str, lon_col: str) -> Tuple[List[Any], List[Any]]:
    if lat_col in frame.columns and lon_col in frame.columns:
        return frame[lat_col].tolist(), frame[lon_col].tolist()

    # frame.geometry raises when no active geometry column is set
    if isinstance(frame, gpd.GeoDataFrame) and getattr(frame, "_geometry_column_name", None) in frame.columns:
        g = frame.geometry
        if frame.crs is not None and frame.crs.to_epsg() != 4326:
            g = g.to_crs("EPSG:4326")
        if not (g.geom_type == "Point").all():
            raise InvalidInputError("GeoDataFrame geometry must contain only Points")
        return g.y.tolist(), g.x.tolist()

    raise InvalidInputError(f"Frame needs '{lat_col}' and '{lon_col}' columns or Point geometry")


# -----------------------
# Process-wide default engine
# -----------------------
_DEFAULT_ENGINE: Optional[CoastProximityEngine] = None
_DEFAULT_LOCK = threading.Lock()


def get_default_engine() -> CoastProximityEngine:
    """
    Engine over the configured dataset, built at most once per process.

    Raises:
        ConfigurationError: unusable dataset or COASTCHECK_* overrides
    """
    global _DEFAULT_ENGINE
    if _DEFAULT_ENGINE is None:
        with _DEFAULT_LOCK:
            if _DEFAULT_ENGINE is None:
                _DEFAULT_ENGINE = CoastProximityEngine.from_path(
                    config.DATASET_PATH,
                    workers=config.env_workers(),
                    default_threshold_m=config.env_threshold_m(),
                )
    return _DEFAULT_ENGINE


def find_closest_coast_point(
    latitude: float,
    longitude: float,
    threshold_m: Optional[float] = None,
    mode: str = config.DEFAULT_MODE,
) -> ProximityResult:
    return get_default_engine().find_closest_coast_point(latitude, longitude, threshold_m, mode)
