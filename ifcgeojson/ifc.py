"""IFC mesh provider backed by ifcopenshell's geometry engine."""

import logging
import pathlib
from typing import List, Optional

import ifcopenshell
import ifcopenshell.geom
import numpy as np

from .errors import ModelOpenError
from .models import Element, Mesh
from .providers import MeshProvider

logger = logging.getLogger(__name__)

_GEOM_SETTINGS = {
    "use-world-coords": True,
    "weld-vertices": True,
}

# Products that only carve other products
_SKIPPED_TYPES = ('IfcOpeningElement', 'IfcVirtualElement')


def _apply_geom_settings(settings, overrides) -> None:
    """Apply iterator settings across ifcopenshell naming conventions."""
    for key, value in overrides.items():
        try:
            settings.set(key, value)
        except Exception:
            alt_key = key.upper().replace('-', '_')
            if hasattr(settings, alt_key):
                settings.set(getattr(settings, alt_key), value)
            else:
                logger.debug(f"Geometry setting {key} not supported")


class IfcMeshProvider(MeshProvider):
    """Elements are ``IfcProduct`` instances that carry a representation.

    The model and geometry settings are shared by every ``create_shape``
    call, so elements are tessellated one at a time.
    """

    thread_safe = False

    def __init__(self, path):
        self.path = pathlib.Path(path)
        if not self.path.exists():
            raise ModelOpenError(self.path, "file does not exist")
        try:
            self.model = ifcopenshell.open(str(self.path))
        except Exception as e:
            raise ModelOpenError(self.path, e) from e

        self.settings = ifcopenshell.geom.settings()
        _apply_geom_settings(self.settings, _GEOM_SETTINGS)

        self._elements: List[Element] = []
        for product in self.model.by_type('IfcProduct'):
            if product.Representation is None:
                continue
            if any(product.is_a(t) for t in _SKIPPED_TYPES):
                continue
            self._elements.append(Element(product.GlobalId, product.is_a()))
        logger.info(f"Opened {self.path.name} ({self.model.schema}): "
                    f"{len(self._elements)} products with geometry")

    def list_elements(self) -> List[Element]:
        return list(self._elements)

    def _product(self, element_id: str):
        try:
            entity = self.model.by_guid(element_id)
        except RuntimeError:
            return None
        # by_guid also finds projects, relationships and property sets
        if not entity.is_a('IfcProduct'):
            return None
        return entity

    def get_element(self, element_id: str) -> Optional[Element]:
        product = self._product(element_id)
        if product is None:
            return None
        return Element(product.GlobalId, product.is_a())

    def get_mesh(self, element_id: str) -> Optional[Mesh]:
        product = self._product(element_id)
        if product is None or getattr(product, 'Representation', None) is None:
            logger.warning(f"No representation for product {element_id}")
            return None

        shape = ifcopenshell.geom.create_shape(self.settings, product)
        geometry = getattr(shape, 'geometry', shape)
        vertices = np.asarray(geometry.verts, dtype=float).reshape(-1, 3)
        faces = np.asarray(geometry.faces, dtype=np.int64)
        logger.debug(f"Product {element_id}: {len(vertices)} vertices, "
                     f"{len(faces) // 3} triangles")
        return Mesh.from_index_buffers(vertices, [faces])
