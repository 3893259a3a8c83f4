"""Tests for the IFC provider on small models written with ifcopenshell."""

from types import SimpleNamespace

import ifcopenshell
import ifcopenshell.geom
import ifcopenshell.guid
import pytest

from ifcgeojson.builder import GeoJsonBuilder
from ifcgeojson.errors import ElementNotFoundError, ModelOpenError
from ifcgeojson.ifc import IfcMeshProvider
from ifcgeojson.providers import open_provider


def _body(model):
    """Minimal product shape; tessellation is replaced in the tests that need it."""
    origin = model.createIfcCartesianPoint((0.0, 0.0, 0.0))
    placement = model.createIfcAxis2Placement3D(origin, None, None)
    context = model.createIfcGeometricRepresentationContext(
        None, "Model", 3, 1.0e-5, placement, None)
    representation = model.createIfcShapeRepresentation(context, "Body", "Brep", [origin])
    return model.createIfcProductDefinitionShape(None, None, [representation])


@pytest.fixture
def ifc_model(tmp_path):
    """IFC4 file with a project, two shaped products, an opening and a bare slab."""
    model = ifcopenshell.file(schema="IFC4")
    guids = {name: ifcopenshell.guid.new()
             for name in ("project", "wall", "column", "opening", "slab")}
    model.createIfcProject(GlobalId=guids["project"], Name="Block A")
    model.createIfcWall(GlobalId=guids["wall"], Name="Wall", Representation=_body(model))
    model.createIfcColumn(GlobalId=guids["column"], Name="Column",
                          Representation=_body(model))
    model.createIfcOpeningElement(GlobalId=guids["opening"], Name="Door opening",
                                  Representation=_body(model))
    model.createIfcSlab(GlobalId=guids["slab"], Name="Slab")

    path = tmp_path / "block.ifc"
    model.write(str(path))
    return path, guids


@pytest.fixture
def fake_tessellation(monkeypatch):
    """Every product tessellates to one flat triangle, the column to a broken buffer."""
    def create_shape(settings, product):
        if product.is_a("IfcColumn"):
            faces = (0, 1, 2, 1)
        else:
            faces = (0, 1, 2)
        geometry = SimpleNamespace(verts=(0.0, 0.0, 0.0, 10.0, 0.0, 0.0, 0.0, 10.0, 0.0),
                                   faces=faces)
        return SimpleNamespace(geometry=geometry)

    monkeypatch.setattr(ifcopenshell.geom, "create_shape", create_shape)


def test_lists_products_with_representation(ifc_model) -> None:
    """Openings and products without a representation are not elements."""
    path, guids = ifc_model
    elements = {el.element_id: el.type_label for el in IfcMeshProvider(path).list_elements()}
    assert elements == {guids["wall"]: "IfcWall", guids["column"]: "IfcColumn"}


def test_open_provider_picks_ifc_by_suffix(ifc_model) -> None:
    path, _ = ifc_model
    assert isinstance(open_provider(path), IfcMeshProvider)


def test_get_element_only_finds_products(ifc_model) -> None:
    path, guids = ifc_model
    provider = IfcMeshProvider(path)
    assert provider.get_element(guids["wall"]) == (guids["wall"], "IfcWall")
    assert provider.get_element(guids["slab"]) == (guids["slab"], "IfcSlab")
    assert provider.get_element(guids["project"]) is None
    assert provider.get_element(ifcopenshell.guid.new()) is None


def test_get_mesh_reads_flat_buffers(ifc_model, fake_tessellation) -> None:
    path, guids = ifc_model
    provider = IfcMeshProvider(path)

    mesh = provider.get_mesh(guids["wall"])
    assert mesh.vertices.tolist() == [[0, 0, 0], [10, 0, 0], [0, 10, 0]]
    assert mesh.faces.tolist() == [[0, 1, 2]]

    assert provider.get_mesh(guids["column"]).face_count == 0
    assert provider.get_mesh(guids["slab"]) is None
    assert provider.get_mesh(guids["project"]) is None


def test_process_all_over_ifc_model(ifc_model, fake_tessellation) -> None:
    path, guids = ifc_model
    doc = GeoJsonBuilder(IfcMeshProvider(path)).process_all()
    assert [f["id"] for f in doc["features"]] == [guids["wall"]]
    assert doc["features"][0]["properties"]["type"] == "IfcWall"


def test_process_single_rejects_non_product_guid(ifc_model) -> None:
    path, guids = ifc_model
    with pytest.raises(ElementNotFoundError):
        GeoJsonBuilder(IfcMeshProvider(path)).process_single(guids["project"])


def test_process_single_product_without_geometry_is_empty(ifc_model) -> None:
    path, guids = ifc_model
    doc = GeoJsonBuilder(IfcMeshProvider(path)).process_single(guids["slab"])
    assert doc == {"type": "FeatureCollection", "features": []}


def test_ifc_provider_is_converted_serially(ifc_model) -> None:
    path, _ = ifc_model
    assert IfcMeshProvider(path).thread_safe is False


def test_corrupt_file_raises_model_open_error(tmp_path) -> None:
    path = tmp_path / "broken.ifc"
    path.write_text("this is not a STEP file\n")
    with pytest.raises(ModelOpenError):
        IfcMeshProvider(path)


def test_missing_file_raises_model_open_error(tmp_path) -> None:
    with pytest.raises(ModelOpenError, match="does not exist"):
        IfcMeshProvider(tmp_path / "absent.ifc")
