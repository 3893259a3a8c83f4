"""GeoJSON Feature / FeatureCollection assembly and serialisation."""

import json
import logging
import pathlib
import traceback
from typing import List, Optional

from shapely.geometry import Polygon, mapping

logger = logging.getLogger(__name__)


def polygon_geometry(rings: List[list], rfc7946: bool = False) -> dict:
    """Geometry dict for a non-empty list of exterior rings.

    One ring gives a ``Polygon`` whose coordinates are the ring itself;
    several give a ``MultiPolygon`` with one single-ring polygon per ring.
    With *rfc7946* the single-ring case is wrapped as a standard polygon
    (``[ring]``).
    """
    if not rings:
        raise ValueError("No rings to build a geometry from")

    if len(rings) == 1:
        if rfc7946:
            geom = mapping(Polygon(rings[0]))
            return {"type": geom["type"],
                    "coordinates": [[list(pt) for pt in r] for r in geom["coordinates"]]}
        return {"type": "Polygon", "coordinates": rings[0]}

    return {"type": "MultiPolygon", "coordinates": [[ring] for ring in rings]}


def create_feature(element_id: str, type_label: str, rings: List[list],
                   rfc7946: bool = False) -> Optional[dict]:
    """Feature for one element, or ``None`` when it has no rings."""
    if not rings:
        return None
    return {
        "type": "Feature",
        "id": element_id,
        "properties": {"type": type_label},
        "geometry": polygon_geometry(rings, rfc7946=rfc7946),
    }


def feature_collection(features) -> dict:
    return {"type": "FeatureCollection", "features": list(features)}


def error_document(exc: BaseException) -> dict:
    """Error-shaped collection written when a run aborts."""
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return {
        "type": "FeatureCollection",
        "features": [],
        "error": str(exc),
        "stackTrace": trace,
    }


def write_geojson(document: dict, output_path) -> pathlib.Path:
    path = pathlib.Path(output_path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(document, f, indent=2)
    size_kb = path.stat().st_size / 1024
    logger.info(f"Wrote {len(document.get('features', []))} features to {path} "
                f"({size_kb:.1f} KB)")
    return path
