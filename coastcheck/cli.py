import argparse
import json
import logging
import os
import sys

import pandas as pd

from . import config
from .engine import CoastProximityEngine
from .errors import ConfigurationError, InvalidInputError, NoDataError


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Check how close a point (or a CSV of visits) is to the coastline"
    )
    ap.add_argument("--lat", type=float, help="Latitude in degrees (e.g., 41.7253)")
    ap.add_argument("--lon", type=float, help="Longitude in degrees (e.g., 2.9411)")
    ap.add_argument(
        "--csv",
        help="CSV of points with lat/lon columns; classified instead of a single point",
    )
    ap.add_argument("--out", help="Output CSV for --csv (defaults to stdout)")
    ap.add_argument("--lat-col", default="lat", help="Latitude column for --csv")
    ap.add_argument("--lon-col", default="lon", help="Longitude column for --csv")
    ap.add_argument(
        "--threshold",
        type=float,
        default=None,
        help=f"Near-coast radius in meters (default COASTCHECK_THRESHOLD_M or {config.DEFAULT_THRESHOLD_M:g})",
    )
    ap.add_argument(
        "--mode",
        choices=config.DISTANCE_MODES,
        default=config.DEFAULT_MODE,
        help="vertex: nearest ring vertex; segment: nearest point on a ring edge",
    )
    ap.add_argument(
        "--dataset",
        default=config.DATASET_PATH,
        help="Coastline GeoJSON or any vector file geopandas can read",
    )
    ap.add_argument("--workers", type=int, default=None, help="Shards for the vertex scan (default COASTCHECK_WORKERS or 1)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def run_cli(args) -> int:
    if args.csv is None and (args.lat is None or args.lon is None):
        print("ERROR: pass --lat and --lon, or --csv", file=sys.stderr)
        return 1
    if args.csv is not None and not os.path.exists(args.csv):
        print(f"ERROR: CSV not found: {args.csv}", file=sys.stderr)
        return 1

    try:
        engine = CoastProximityEngine.from_path(
            args.dataset,
            workers=args.workers if args.workers is not None else config.env_workers(),
            default_threshold_m=config.env_threshold_m(),
        )

        if args.csv is not None:
            try:
                df = pd.read_csv(args.csv)
            except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
                raise InvalidInputError(f"Unreadable CSV {args.csv}: {e}") from e
            out = engine.classify_points(
                df, lat_col=args.lat_col, lon_col=args.lon_col,
                threshold_m=args.threshold, mode=args.mode,
            )
            if args.out:
                out.to_csv(args.out, index=False)
                print(f"[coastcheck] Wrote {len(out)} rows to {args.out}", file=sys.stderr)
            else:
                out.to_csv(sys.stdout, index=False)
            return 0

        result = engine.find_closest_coast_point(args.lat, args.lon, args.threshold, args.mode)
        print(json.dumps(result.to_dict()))
        return 0
    except InvalidInputError as e:
        print(f"[coastcheck] Invalid input: {e}", file=sys.stderr)
        return 1
    except (ConfigurationError, NoDataError) as e:
        print(f"[coastcheck] Dataset error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\n[coastcheck] Interrupted.", file=sys.stderr)
        return 130  # 128 + SIGINT


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return run_cli(args)
