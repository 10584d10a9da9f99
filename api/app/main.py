#!/usr/bin/env python3
# api/app/main.py

import os
import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from coastcheck import config
from coastcheck.engine import CoastProximityEngine, get_default_engine
from coastcheck.errors import ConfigurationError, InvalidInputError, NoDataError

APP_NAME = "Coastcheck proximity API"

logger = logging.getLogger(__name__)

# ---------- Config ----------
_FRONTEND_ORIGIN = os.environ.get("COASTCHECK_FRONTEND_ORIGIN", "*").strip() or "*"

# ---------- Engine (built once) ----------
def get_engine() -> CoastProximityEngine:
    try:
        return get_default_engine()
    except ConfigurationError as e:
        logger.error(f"Coastline dataset unavailable: {e}")
        raise HTTPException(status_code=503, detail=f"Coastline dataset unavailable: {e}")

# ---------- FastAPI ----------
app = FastAPI(title=APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[_FRONTEND_ORIGIN],
    allow_credentials=_FRONTEND_ORIGIN != "*",
    allow_methods=["GET"],
    allow_headers=["*"],
)

@app.get("/health")
def health():
    return {"ok": True, "app": APP_NAME}

@app.get("/api/coast-proximity")
def get_coast_proximity(
    lat: float = Query(..., description="Latitude in degrees, e.g. 41.7253"),
    lon: float = Query(..., description="Longitude in degrees, e.g. 2.9411"),
    threshold_m: Optional[float] = Query(None, description="Near-coast radius in meters (server default when omitted)"),
    mode: str = Query(config.DEFAULT_MODE, description="'vertex' or 'segment'"),
    engine: CoastProximityEngine = Depends(get_engine),
):
    """
    Returns {isNear, minDistanceMeters, closestPoint: [lon, lat]} for a
    visit location.
    """
    try:
        result = engine.find_closest_coast_point(lat, lon, threshold_m, mode)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoDataError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return result.to_dict()


if __name__ == "__main__":
    # For local dev, allow overriding the port
    port = int(os.environ.get("PORT", 5174))
    logging.basicConfig(level=logging.INFO)
    print(f"Starting {APP_NAME} on http://0.0.0.0:{port}")
    print(f"Using coastline dataset {config.DATASET_PATH}")
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=True, app_dir="api/app")
