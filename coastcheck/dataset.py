"""
Immutable in-memory coastline dataset.

The geometry collection is parsed and flattened exactly once; queries only
ever read the resulting vertex array.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple, Union

import numpy as np
import geopandas as gpd

from .config import POLYGON_TYPES
from .errors import ConfigurationError
from .geometry import clean_geoms, flatten_rings, is_polygonal, iter_boundary_rings

logger = logging.getLogger(__name__)

GEOJSON_SUFFIXES = {".json", ".geojson"}


def _geometries_from_geojson(obj: Any) -> List[Any]:
    """Pull the geometry list out of any common GeoJSON container."""
    if isinstance(obj, (list, tuple)):
        return list(obj)
    if not isinstance(obj, dict):
        raise ConfigurationError(f"Expected a GeoJSON object, got {type(obj).__name__}")

    kind = obj.get("type")
    if kind == "GeometryCollection":
        return list(obj.get("geometries") or [])
    if kind == "FeatureCollection":
        return [f.get("geometry") for f in obj.get("features") or [] if isinstance(f, dict)]
    if kind == "Feature":
        return [obj.get("geometry")]
    if "coordinates" in obj:
        return [obj]
    raise ConfigurationError(f"Unrecognised GeoJSON document type: {kind!r}")


@dataclass(frozen=True, eq=False)
class CoastlineDataset:
    """
    Polygon/MultiPolygon geometries plus their flattened boundary vertices.

    vertices is an (N, 2) read-only array of (lon, lat) in iteration order:
    geometries in dataset order, rings in geometry order, vertices in ring
    order. ring_ids maps each vertex back to its ring.
    """
    geometries: Tuple[Any, ...]
    vertices: np.ndarray
    ring_ids: np.ndarray
    source: Optional[str] = None

    @property
    def n_vertices(self) -> int:
        return int(len(self.vertices))

    @property
    def n_rings(self) -> int:
        return int(len(np.unique(self.ring_ids)))

    @classmethod
    def from_geometries(cls, geometries: Iterable[Any], source: Optional[str] = None) -> "CoastlineDataset":
        geometries = tuple(geometries)
        label = source or "<memory>"
        if not geometries:
            raise ConfigurationError(f"Coastline dataset {label} is empty")

        polygonal = tuple(g for g in geometries if is_polygonal(g))
        if not polygonal:
            raise ConfigurationError(
                f"Coastline dataset {label} has no {'/'.join(POLYGON_TYPES)} geometries "
                f"({len(geometries)} geometries of other types)"
            )

        vertices, ring_ids = flatten_rings(iter_boundary_rings(polygonal))
        if not np.isfinite(vertices).all():
            raise ConfigurationError(f"Coastline dataset {label} contains non-finite coordinates")

        vertices.setflags(write=False)
        ring_ids.setflags(write=False)

        skipped = len(geometries) - len(polygonal)
        logger.info(
            f"Loaded coastline dataset {label}: {len(polygonal)} polygonal geometries, "
            f"{skipped} skipped, {len(vertices)} boundary vertices"
        )
        if len(vertices) == 0:
            logger.warning(f"Coastline dataset {label} has polygons but no boundary vertices")

        return cls(geometries=polygonal, vertices=vertices, ring_ids=ring_ids, source=source)

    @classmethod
    def from_geojson(cls, obj: Any, source: Optional[str] = None) -> "CoastlineDataset":
        """Build from a GeometryCollection, FeatureCollection, Feature, geometry or list."""
        return cls.from_geometries(_geometries_from_geojson(obj), source=source)

    @classmethod
    def from_geodataframe(
        cls,
        gdf: gpd.GeoDataFrame,
        repair: bool = False,
        source: Optional[str] = None,
    ) -> "CoastlineDataset":
        """
        Build from a GeoDataFrame, reprojecting to EPSG:4326 first.

        Null, empty and non-polygonal rows are dropped before the usual
        checks, so a frame holding only lines fails like an empty collection.
        """
        if gdf is None or len(gdf) == 0:
            raise ConfigurationError(f"Coastline dataset {source or '<memory>'} is empty")
        if gdf.crs is not None and gdf.crs.to_epsg() != 4326:
            gdf = gdf.to_crs("EPSG:4326")
        clean = clean_geoms(gdf, list(POLYGON_TYPES), repair=repair)
        if clean.empty:
            raise ConfigurationError(
                f"Coastline dataset {source or '<memory>'} has no {'/'.join(POLYGON_TYPES)} geometries"
            )
        return cls.from_geometries(list(clean), source=source)

    @classmethod
    def load(cls, path: Union[str, Path], repair: bool = False) -> "CoastlineDataset":
        """
        Read a coastline dataset from disk.

        .json/.geojson files are parsed directly so coordinate order survives
        untouched; any other suffix goes through geopandas.read_file.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Coastline dataset not found: {path}")

        if path.suffix.lower() in GEOJSON_SUFFIXES:
            try:
                with open(path, "r", encoding="utf-8") as f:
                    obj = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigurationError(f"Failed to read coastline dataset {path}: {e}") from e
            return cls.from_geojson(obj, source=str(path))

        try:
            gdf = gpd.read_file(path)
        except Exception as e:
            raise ConfigurationError(f"Failed to read coastline dataset {path}: {e}") from e
        return cls.from_geodataframe(gdf, repair=repair, source=str(path))
