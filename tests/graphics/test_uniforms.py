import math

import numpy as np
import pytest

from kestrel.graphics.attributes import Camera, Transform, UniformAttributes


def test_from_dict_fills_sections_and_ignores_matrices():
    u = UniformAttributes.from_dict(
        {
            "light": {"position": [1, 2, 3], "intensity": {"x": 4, "y": 5, "z": 6}},
            "material": {"diffuse_color": [0.5, 0.5, 0.5], "shininess": 8},
            "camera": {"is_perspective": True, "field_of_view": 1.0, "aspect_ratio": 2.0},
            "transform": {"angle": 0.5, "distance": 2.0},
            "model_matrix": [[0] * 4] * 4,
            "unknown": 1,
        }
    )

    assert np.array_equal(u.light.position, [1.0, 2.0, 3.0])
    assert np.array_equal(u.light.intensity, [4.0, 5.0, 6.0])
    assert u.material.shininess == 8.0
    assert np.array_equal(u.material.specular_color, [0.0, 0.0, 0.0])
    assert u.camera.is_perspective
    assert u.transform.distance == 2.0
    assert np.array_equal(u.model_matrix, np.eye(4))


def test_from_dict_missing_sections_default_to_zero():
    u = UniformAttributes.from_dict({})
    assert not u.camera.is_perspective
    assert u.camera.aspect_ratio == 0.0
    assert u.transform.angle == 0.0


def test_orthographic_projection_is_identity():
    u = UniformAttributes(camera=Camera(is_perspective=False))
    u.calc_matrices()
    assert np.array_equal(u.projection_matrix, np.eye(4))


def test_perspective_projection_shape():
    u = UniformAttributes(
        camera=Camera(is_perspective=True, field_of_view=0.7, aspect_ratio=1.5)
    )
    u.calc_projection_matrix()

    assert u.projection_matrix[3, 3] == 0.0
    assert u.projection_matrix[3, 2] == -1.0
    # near=-1, far=1
    assert u.projection_matrix[2, 2] == pytest.approx(-0.5)
    assert u.projection_matrix[2, 3] == pytest.approx(0.5)


def test_model_matrix_translation_and_rotation():
    u = UniformAttributes(transform=Transform(angle=0.5, distance=2.0))
    u.calc_model_matrix()

    m = u.model_matrix
    assert m[2, 3] == pytest.approx(-2.0)
    assert m[0, 0] == pytest.approx(math.cos(math.pi / 2), abs=1e-12)
    assert m[2, 0] == pytest.approx(1.0)
    assert np.allclose(u.normal_matrix, np.linalg.inv(m).T)


def test_view_matrix_translates_by_negated_camera():
    u = UniformAttributes(camera=Camera(position=np.array([1.0, -2.0, 3.0])))
    u.calc_view_matrix()
    assert np.allclose(u.view_matrix[:3, 3], [-1.0, 2.0, -3.0])


@pytest.mark.parametrize(
    "data",
    [
        {"camera": []},
        {"light": {"position": [1.0, 2.0]}},
        {"light": {"position": "abc"}},
        {"light": {"position": {"x": "1"}}},
        {"camera": {"aspect_ratio": None}},
        {"transform": {"angle": True}},
    ],
)
def test_from_dict_rejects_mistyped_fields(data):
    with pytest.raises(ValueError):
        UniformAttributes.from_dict(data)
