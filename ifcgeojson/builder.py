"""GeoJsonBuilder: runs the mesh-to-GeoJSON pipeline over a whole model."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

from .errors import ElementNotFoundError
from .features import create_feature, feature_collection
from .geometry import rings_from_mesh
from .models import ConversionOptions, ConversionStats, Element
from .providers import MeshProvider

logger = logging.getLogger(__name__)


class GeoJsonBuilder:
    def __init__(self, provider: MeshProvider, options: Optional[ConversionOptions] = None,
                 log: Optional[logging.Logger] = None):
        """
        provider: source of elements and their meshes.
        options: projection, range policy and output settings.
        log: diagnostics logger; defaults to this module's logger.
        """
        self.provider = provider
        self.options = options or ConversionOptions()
        self.logger = log or logger
        self.stats = ConversionStats()

    # ── Per element ────────────────────────────────────────────────────

    def rings_for_element(self, element: Element,
                          stats: Optional[ConversionStats] = None) -> List[list]:
        """All valid rings of one element, empty if its geometry is unusable."""
        stats = stats if stats is not None else self.stats
        try:
            mesh = self.provider.get_mesh(element.element_id)
            if mesh is None:
                self.logger.warning(f"→ No geometry for product {element.element_id}")
                return []
            self.logger.debug(f"→ {element.element_id}: {mesh.vertex_count} vertices, "
                              f"{mesh.face_count} faces")
            return rings_from_mesh(mesh, self.options, stats)
        except Exception:
            self.logger.exception(f"Error processing element {element.element_id}")
            stats.elements_failed += 1
            return []

    def convert_element(self, element: Element,
                        stats: Optional[ConversionStats] = None) -> Optional[dict]:
        """Feature for one element, or ``None`` when it yields no rings."""
        stats = stats if stats is not None else self.stats
        stats.elements_seen += 1
        rings = self.rings_for_element(element, stats)
        feature = create_feature(element.element_id, element.type_label, rings,
                                 rfc7946=self.options.rfc7946)
        if feature is None:
            stats.elements_empty += 1
            self.logger.info(f"  → Product {element.element_id} produced no rings")
        else:
            stats.elements_emitted += 1
            self.logger.info(f"  → Product {element.element_id} ({element.type_label}): "
                             f"{feature['geometry']['type']} with {len(rings)} rings")
        return feature

    def _convert_isolated(self, element: Element) -> Tuple[Optional[dict], ConversionStats]:
        stats = ConversionStats()
        return self.convert_element(element, stats), stats

    # ── Whole model ────────────────────────────────────────────────────

    def process_all(self) -> dict:
        """FeatureCollection of every element with at least one valid ring."""
        t0 = time.perf_counter()
        elements = self.provider.list_elements()
        self.logger.info(f"Found {len(elements)} products with geometry")

        workers = self.options.workers
        if workers > 1 and not self.provider.thread_safe:
            self.logger.info(f"{type(self.provider).__name__} is not thread safe, "
                             f"converting serially instead of with {workers} workers")
            workers = 1

        if workers > 1 and len(elements) > 1:
            # map() yields in submission order, so output order is unchanged
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(self._convert_isolated, elements))
            features = []
            for feature, stats in results:
                self.stats.merge(stats)
                if feature is not None:
                    features.append(feature)
        else:
            features = [f for f in (self.convert_element(el) for el in elements)
                        if f is not None]

        elapsed = time.perf_counter() - t0
        self.logger.info(f"Converted model in {elapsed:.2f}s: {self.stats.summary()}")
        return feature_collection(features)

    def process_single(self, element_id: str) -> dict:
        """FeatureCollection for one requested element.

        Raises ``ElementNotFoundError`` when the model has no such element.
        """
        element = self.provider.get_element(element_id)
        if element is None:
            raise ElementNotFoundError(element_id)

        feature = self.convert_element(element)
        if feature is None:
            self.logger.warning(f"No valid geometry found for element {element_id}")
            return feature_collection([])
        return feature_collection([feature])
