import numpy as np
import pytest

from kestrel.assets.importers.mesh import (
    MtlImporter,
    ObjImporter,
    OffImporter,
    compute_vertex_normals,
)
from kestrel.assets.importers.scene import UniformImporter
from kestrel.assets.types import MeshData, ObjScene
from kestrel.graphics.attributes import UniformAttributes


def write(tmp_path, name, text):
    f = tmp_path / name
    f.write_text(text)
    return f


def test_obj_importer_simple_triangle(tmp_path):
    f = write(
        tmp_path,
        "triangle.obj",
        """
        v 0.0 0.0 0.0
        v 1.0 0.0 0.0
        v 0.0 1.0 0.0
        vn 0.0 0.0 1.0
        vt 0.0 0.0
        f 1/1/1 2/1/1 3/1/1
        """,
    )

    scene = ObjImporter().import_file(f)

    assert isinstance(scene, ObjScene)
    assert len(scene.models) == 1
    mesh = scene.models[0].mesh
    assert isinstance(mesh, MeshData)
    assert mesh.name == "triangle"
    assert mesh.vertex_count == 3
    assert list(mesh.indices) == [0, 1, 2]
    assert np.allclose(mesh.normals, [[0, 0, 1]] * 3)


def test_obj_quad_is_fan_triangulated_and_deduplicated(tmp_path):
    f = write(
        tmp_path,
        "quad.obj",
        "v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nf 1 2 3 4\n",
    )

    mesh = ObjImporter().import_file(f).models[0].mesh

    assert mesh.vertex_count == 4
    assert list(mesh.indices) == [0, 1, 2, 0, 2, 3]
    assert mesh.face_count == 2
    # no vn: normals computed from the winding
    assert np.allclose(mesh.normals, [[0, 0, 1]] * 4)


def test_obj_negative_and_normal_only_indices(tmp_path):
    f = write(
        tmp_path,
        "neg.obj",
        "v 0 0 0\nv 1 0 0\nv 0 1 0\nvn 0 0 -1\nf -3//-1 -2//-1 -1//-1\n",
    )

    mesh = ObjImporter().import_file(f).models[0].mesh

    assert list(mesh.indices) == [0, 1, 2]
    assert np.allclose(mesh.normals, [[0, 0, -1]] * 3)


def test_obj_objects_and_materials(tmp_path):
    write(
        tmp_path,
        "mats.mtl",
        "newmtl red\nKd 1 0 0\nnewmtl blue\nKd 0 0 1\nNs 4\n",
    )
    f = write(
        tmp_path,
        "two.obj",
        """
        mtllib mats.mtl
        v 0 0 0
        v 1 0 0
        v 0 1 0
        o first
        usemtl red
        f 1 2 3
        o second
        usemtl blue
        f 3 2 1
        """,
    )

    scene = ObjImporter().import_file(f)

    assert [m.name for m in scene.models] == ["first", "second"]
    assert [m.mesh.material_id for m in scene.models] == [0, 1]
    assert [m.name for m in scene.materials] == ["red", "blue"]
    assert scene.materials[1].shininess == 4.0


def test_obj_importer_invalid_file(tmp_path):
    f = write(tmp_path, "empty.obj", "")

    with pytest.raises(ValueError, match="No geometry found"):
        ObjImporter().import_file(f)


@pytest.mark.parametrize("face", ["f 1 2 4", "f 0 1 2", "f 1 2"])
def test_obj_bad_faces_report_line(tmp_path, face):
    f = write(tmp_path, "bad.obj", f"v 0 0 0\nv 1 0 0\nv 0 1 0\n{face}\n")

    with pytest.raises(ValueError, match=r"bad\.obj:4"):
        ObjImporter().import_file(f)


def test_mtl_importer(tmp_path):
    f = write(
        tmp_path,
        "clay.mtl",
        "# comment\nKd 9 9 9\nnewmtl clay\nKa 0.1 0.1 0.1\nKd 0.8 0.5 0.2\nKs 0.3 0.3 0.3\nNs 16\n",
    )

    (clay,) = MtlImporter().import_file(f)

    assert clay.name == "clay"
    assert clay.diffuse == (0.8, 0.5, 0.2)
    material = clay.to_material()
    assert np.allclose(material.ambient_color, [0.1, 0.1, 0.1])
    assert material.shininess == 16.0


def test_off_importer(tmp_path):
    f = write(
        tmp_path,
        "square.off",
        "OFF\n# a unit square\n4 1 0\n0 0 0\n1 0 0\n1 1 0\n0 1 0\n4 0 1 2 3\n",
    )

    mesh = OffImporter().import_file(f)

    assert mesh.name == "square"
    assert mesh.vertex_count == 4
    assert list(mesh.indices) == [0, 1, 2, 0, 2, 3]
    assert list(mesh.face_vertex_counts) == [3, 3]
    assert np.allclose(mesh.normals, [[0, 0, 1]] * 4)


def test_off_counts_on_header_line(tmp_path):
    f = write(tmp_path, "tri.off", "OFF 3 1 0\n0 0 0\n1 0 0\n0 1 0\n3 0 1 2\n")
    assert OffImporter().import_file(f).face_count == 1


@pytest.mark.parametrize(
    "text, message",
    [
        ("3 1 0\n0 0 0\n1 0 0\n0 1 0\n3 0 1 2\n", "Missing OFF header"),
        ("OFF\n3 1 0\n0 0 0\n1 0 0\n0 1 0\n3 0 1 7\n", "out of range"),
        ("OFF\n3 1 0\n0 0 0\n1 0 0\n", "Truncated"),
        ("OFF\n3 0 0\n0 0 0\n1 0 0\n0 1 0\n", "No geometry"),
    ],
)
def test_off_importer_rejects_malformed(tmp_path, text, message):
    f = write(tmp_path, "bad.off", text)
    with pytest.raises(ValueError, match=message):
        OffImporter().import_file(f)


def test_compute_vertex_normals_area_weighted():
    positions = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0]], dtype=np.float64)
    normals = compute_vertex_normals(positions, np.array([0, 2, 1]))
    assert np.allclose(normals, [[0, 0, -1]] * 3)


def test_uniform_importer(tmp_path):
    f = write(tmp_path, "scene.json", '{"transform": {"angle": 0.5}}')

    uniform = UniformImporter().import_file(f)

    assert isinstance(uniform, UniformAttributes)
    assert uniform.transform.angle == 0.5


def test_uniform_importer_requires_object(tmp_path):
    f = write(tmp_path, "scene.json", "[1, 2, 3]")
    with pytest.raises(ValueError, match="JSON object"):
        UniformImporter().import_file(f)

