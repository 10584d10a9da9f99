import math
import os
from pathlib import Path

from .errors import ConfigurationError

# Spherical earth radius used by every haversine in the package
EARTH_RADIUS_M = 6371000.0

# Bundled coastline asset (GeoJSON GeometryCollection)
PACKAGE_DATASET = Path(__file__).parent / "data" / "coastlines.json"
DATASET_PATH = os.environ.get("COASTCHECK_DATASET", str(PACKAGE_DATASET))

# "Near the sea" radius for a visit
DEFAULT_THRESHOLD_M = 500.0

# Shards for the vertex scan; 1 keeps it on the calling thread
WORKERS = 1

POLYGON_TYPES = ("Polygon", "MultiPolygon")

# vertex: nearest ring vertex (historical behaviour)
# segment: nearest point on any ring edge
DISTANCE_MODES = ("vertex", "segment")
DEFAULT_MODE = "vertex"

# Batch output columns
NEAR_COL = "is_near"
DISTANCE_COL = "coast_distance_m"
COAST_LON_COL = "coast_lon"
COAST_LAT_COL = "coast_lat"


def env_threshold_m() -> float:
    """COASTCHECK_THRESHOLD_M, or DEFAULT_THRESHOLD_M when unset."""
    raw = os.environ.get("COASTCHECK_THRESHOLD_M")
    if raw is None or not raw.strip():
        return DEFAULT_THRESHOLD_M
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"COASTCHECK_THRESHOLD_M must be a number, got {raw!r}") from e
    if not math.isfinite(value) or value < 0:
        raise ConfigurationError(f"COASTCHECK_THRESHOLD_M must be finite and non-negative, got {raw!r}")
    return value


def env_workers() -> int:
    """COASTCHECK_WORKERS, or WORKERS when unset."""
    raw = os.environ.get("COASTCHECK_WORKERS")
    if raw is None or not raw.strip():
        return WORKERS
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"COASTCHECK_WORKERS must be an integer, got {raw!r}") from e
    if value < 1:
        raise ConfigurationError(f"COASTCHECK_WORKERS must be >= 1, got {raw!r}")
    return value
