"""
Boundary ring extraction for Polygon/MultiPolygon geometries.

Geometries arrive either as GeoJSON mappings (the bundled asset) or as
Shapely 2.x objects (anything read through geopandas). Both are reduced to
plain coordinate rings so the distance scan never depends on Shapely's
validity rules: degenerate rings (a single vertex, unclosed rings) are kept
as-is.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
import geopandas as gpd
import shapely
from shapely.geometry import mapping
from shapely.geometry.base import BaseGeometry

from .config import POLYGON_TYPES
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

Ring = Sequence[Sequence[float]]


def geometry_type(geometry: Any) -> Optional[str]:
    """Return the GeoJSON type name of a mapping or Shapely geometry."""
    if geometry is None:
        return None
    if isinstance(geometry, BaseGeometry):
        return geometry.geom_type
    if isinstance(geometry, dict):
        return geometry.get("type")
    return None


def is_polygonal(geometry: Any) -> bool:
    return geometry_type(geometry) in POLYGON_TYPES


def polygon_rings(geometry: Any) -> List[Ring]:
    """
    Extract the boundary rings of a Polygon or MultiPolygon.

    Rings come back in geometry order: for a Polygon the exterior then its
    holes, for a MultiPolygon each member polygon in turn. Any other geometry
    type yields an empty list.

    Args:
        geometry: GeoJSON mapping or Shapely geometry

    Returns:
        List of rings, each a sequence of (lon, lat[, z]) positions
    """
    if not is_polygonal(geometry):
        return []

    if isinstance(geometry, BaseGeometry):
        geometry = mapping(geometry)

    coords = geometry.get("coordinates") or []
    if geometry["type"] == "Polygon":
        return list(coords)

    # MultiPolygon: flatten one level
    return [ring for polygon in coords for ring in (polygon or [])]


def iter_boundary_rings(geometries: Iterable[Any]) -> Iterator[Ring]:
    """Yield every boundary ring of every polygonal geometry, in dataset order."""
    skipped = 0
    for geometry in geometries:
        if not is_polygonal(geometry):
            skipped += 1
            continue
        yield from polygon_rings(geometry)
    if skipped:
        logger.debug(f"Skipped {skipped} non-polygonal geometries")


def flatten_rings(rings: Iterable[Ring]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Flatten rings into a single vertex array.

    Returns:
        Tuple of (vertices, ring_ids): vertices is an (N, 2) float64 array of
        (lon, lat); ring_ids[i] is the ordinal of the ring vertex i came from.
        Consecutive vertices sharing a ring id form a ring edge.

    Raises:
        ConfigurationError: if a position has fewer than two numeric values
    """
    lons: List[float] = []
    lats: List[float] = []
    ids: List[int] = []

    for ring_id, ring in enumerate(rings):
        for position in ring or []:
            try:
                lon, lat = float(position[0]), float(position[1])
            except (TypeError, ValueError, IndexError, KeyError) as e:
                raise ConfigurationError(
                    f"Malformed position {position!r} in ring {ring_id}: {e}"
                ) from e
            lons.append(lon)
            lats.append(lat)
            ids.append(ring_id)

    vertices = np.column_stack(
        [np.asarray(lons, dtype=np.float64), np.asarray(lats, dtype=np.float64)]
    ) if lons else np.empty((0, 2), dtype=np.float64)
    ring_ids = np.asarray(ids, dtype=np.int64)
    return vertices, ring_ids


def clean_geoms(
    gdf: gpd.GeoDataFrame,
    types: Optional[List[str]] = None,
    repair: bool = False,
) -> gpd.GeoSeries:
    """
    Drop null, empty and off-type geometries from a GeoDataFrame.

    Args:
        gdf: GeoDataFrame with potentially problematic geometries
        types: Optional list of allowed geometry types (e.g. ["Polygon", "MultiPolygon"])
        repair: Run shapely.make_valid on the survivors. This may rewrite
            ring vertices, so it is off unless the source is known to be invalid.

    Returns:
        Clean GeoSeries in the original row order
    """
    g = gdf.geometry

    g = g[g.notna()]
    g = g[~g.is_empty]
    g = g[g.apply(lambda x: isinstance(x, BaseGeometry))]

    if types is not None:
        g = g[g.apply(lambda x: x.geom_type in types)]

    if repair:
        g = g.apply(lambda x: shapely.make_valid(x))
        if types is not None:
            # make_valid can split a polygon into a GeometryCollection
            g = g[g.apply(lambda x: x.geom_type in types)]

    return g
