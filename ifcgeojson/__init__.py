"""ifcgeojson package: planar GeoJSON footprints from triangulated building meshes.

Import constants FIRST so that .env overrides and logging are configured
before any other module logs.
"""

from ifcgeojson import constants as _constants  # noqa: F401

from ifcgeojson.builder import GeoJsonBuilder
from ifcgeojson.errors import ConversionError, ElementNotFoundError, ModelOpenError
from ifcgeojson.models import ConversionOptions, Element, Mesh, Projection, RangePolicy
from ifcgeojson.providers import InMemoryMeshProvider, MeshProvider, TrimeshProvider, open_provider
