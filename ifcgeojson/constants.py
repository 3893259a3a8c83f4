"""Configuration constants, environment overrides and logging setup."""

import os
import logging

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# ── Coordinate transform ────────────────────────────────────────────────
# Mesh-local units (metres, millimetres...) are mapped to small-magnitude
# geographic units by a fixed linear scale. This is not a map projection.
COORDINATE_SCALE = 0.00001

LON_MIN, LON_MAX = -180.0, 180.0
LAT_MIN, LAT_MAX = -90.0, 90.0

# ── Geometry tolerances ─────────────────────────────────────────────────
EPSILON = 1e-9              # per-coordinate tolerance for coincident points
POWER_ITERATIONS = 100      # fixed iteration count for PCA power iteration

AXES = {'x': 0, 'y': 1, 'z': 2}

# ── Environment overrides ───────────────────────────────────────────────
ENV_SCALE = "IFCGEOJSON_SCALE"
ENV_PROJECTION = "IFCGEOJSON_PROJECTION"
ENV_RANGE_POLICY = "IFCGEOJSON_RANGE_POLICY"
ENV_INCLUDE_ELEVATION = "IFCGEOJSON_INCLUDE_ELEVATION"
ENV_LOG_LEVEL = "IFCGEOJSON_LOG_LEVEL"

LOG_LEVEL = os.environ.get(ENV_LOG_LEVEL, "INFO").strip().upper() or "INFO"

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO),
                    format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)
