from .dataset import CoastlineDataset
from .engine import (
    CoastProximityEngine,
    ProximityResult,
    find_closest_coast_point,
    get_default_engine,
)
from .errors import CoastProximityError, ConfigurationError, InvalidInputError, NoDataError

__all__ = [
    "CoastlineDataset",
    "CoastProximityEngine",
    "ProximityResult",
    "find_closest_coast_point",
    "get_default_engine",
    "CoastProximityError",
    "ConfigurationError",
    "InvalidInputError",
    "NoDataError",
]

# -------------------------
# coastcheck file structure
# -------------------------
# config.py — constants & env overrides (dataset path, threshold, workers).
# errors.py — ConfigurationError / InvalidInputError / NoDataError.
# geometry.py — ring extraction from Polygon/MultiPolygon, vertex flattening, GeoDataFrame hygiene.
# distance.py — haversine (scalar + numpy), first-minimum reduction, segment candidates, validation.
# dataset.py — immutable CoastlineDataset loaded once from GeoJSON or any geopandas source.
# engine.py — CoastProximityEngine queries, batch classification, guarded default engine.
# cli.py — argparse entrypoint (single point or CSV batch).
