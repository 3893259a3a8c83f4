"""Mesh providers: the geometry-engine side of the conversion.

A provider enumerates convertible elements and hands out one triangulated
``Mesh`` per element. The pipeline only talks to this interface, so any
geometry engine can be plugged in.
"""

import logging
import pathlib
from typing import Dict, List, Optional, Tuple

import numpy as np
import trimesh

from .errors import ModelOpenError
from .models import Element, Mesh

logger = logging.getLogger(__name__)

IFC_SUFFIXES = ('.ifc', '.ifczip')


class MeshProvider:
    """Interface every geometry source implements.

    ``thread_safe`` tells the builder whether ``get_mesh`` may be called from
    several worker threads at once.
    """

    thread_safe = True

    def list_elements(self) -> List[Element]:
        """Elements with attached geometry, in stable order."""
        raise NotImplementedError

    def get_mesh(self, element_id: str) -> Optional[Mesh]:
        """Triangulated geometry of one element, or ``None`` if it has none."""
        raise NotImplementedError

    def get_element(self, element_id: str) -> Optional[Element]:
        for element in self.list_elements():
            if element.element_id == element_id:
                return element
        return None

    def has_element(self, element_id: str) -> bool:
        return self.get_element(element_id) is not None


class InMemoryMeshProvider(MeshProvider):
    """Dict-backed provider for embedding and tests."""

    def __init__(self):
        self._elements: Dict[str, Tuple[Element, Optional[Mesh]]] = {}

    def add(self, element_id: str, type_label: str, mesh: Optional[Mesh]) -> None:
        self._elements[element_id] = (Element(element_id, type_label), mesh)

    def list_elements(self) -> List[Element]:
        return [el for el, mesh in self._elements.values() if mesh is not None]

    def get_element(self, element_id: str) -> Optional[Element]:
        entry = self._elements.get(element_id)
        return entry[0] if entry else None

    def get_mesh(self, element_id: str) -> Optional[Mesh]:
        entry = self._elements.get(element_id)
        return entry[1] if entry else None


class TrimeshProvider(MeshProvider):
    """Provider over any mesh/scene file trimesh can load (OBJ, PLY, STL, GLB...).

    Every geometry node of the scene is one element; its vertices are baked
    into world coordinates through the scene graph.
    """

    def __init__(self, path, default_type: str = "Mesh"):
        self.path = pathlib.Path(path)
        self.default_type = default_type
        if not self.path.exists():
            raise ModelOpenError(self.path, "file does not exist")
        try:
            self.scene = trimesh.load(str(self.path), force='scene')
        except Exception as e:
            raise ModelOpenError(self.path, e) from e

        self._nodes: Dict[str, Tuple[str, np.ndarray]] = {}
        self._elements: List[Element] = []
        for node_name in self.scene.graph.nodes_geometry:
            transform, geom_name = self.scene.graph[node_name]
            geom = self.scene.geometry.get(geom_name)
            if not isinstance(geom, trimesh.Trimesh) or len(geom.faces) == 0:
                continue
            type_label = geom.metadata.get('type') or self.default_type
            self._nodes[node_name] = (geom_name, transform)
            self._elements.append(Element(str(node_name), str(type_label)))
        logger.info(f"Loaded {self.path.name}: {len(self._elements)} mesh elements")

    def list_elements(self) -> List[Element]:
        return list(self._elements)

    def get_mesh(self, element_id: str) -> Optional[Mesh]:
        node = self._nodes.get(element_id)
        if node is None:
            return None
        geom_name, transform = node
        geom = self.scene.geometry[geom_name]
        vertices = trimesh.transformations.transform_points(geom.vertices, transform)
        return Mesh(vertices=vertices, faces=geom.faces)


def open_provider(path, kind: str = 'auto') -> MeshProvider:
    """Open *path* with the provider matching *kind* (``auto``, ``ifc`` or ``mesh``)."""
    path = pathlib.Path(path)
    kind = (kind or 'auto').lower()
    if kind == 'auto':
        kind = 'ifc' if path.suffix.lower() in IFC_SUFFIXES else 'mesh'

    if kind == 'ifc':
        from .ifc import IfcMeshProvider  # ifcopenshell is only needed for IFC input
        return IfcMeshProvider(path)
    if kind == 'mesh':
        return TrimeshProvider(path)
    raise ValueError(f"Unsupported model kind: {kind}")
