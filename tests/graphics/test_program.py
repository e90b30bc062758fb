import logging

import numpy as np
import pytest

from kestrel.errors import GeometryDegenerate, IndexOutOfRange, ShaderStageFailure
from kestrel.graphics.program import DegeneratePolicy, Program, validate_indices
from kestrel.graphics.shaders import (
    alpha_over_depth_blend,
    constant_color_fragment,
    identity_vertex,
)
from kestrel.types import PrimitiveType

from conftest import RED, clip, flat_program


def test_render_triangles(uniform, frame_buffer, red_program, big_triangle):
    count = red_program.render(uniform, big_triangle, [0, 1, 2], frame_buffer)
    assert count > 0
    assert frame_buffer.get(5, 4).color == (255, 0, 0, 255)


def test_trailing_partial_group_is_ignored(uniform, frame_buffer, red_program, big_triangle):
    full = red_program.render(uniform, big_triangle, [0, 1, 2, 0], frame_buffer)
    frame_buffer.clear()
    assert full == red_program.render(uniform, big_triangle, [0, 1, 2], frame_buffer)


def test_empty_indices_leave_buffer_untouched(uniform, frame_buffer, red_program, big_triangle):
    assert red_program.render(uniform, big_triangle, [], frame_buffer) == 0
    assert np.all(frame_buffer.color == 255)
    assert np.all(frame_buffer.depth == 100.0)


@pytest.mark.parametrize("indices", [[0, 1, 3], [0, -1, 2], [0, 1, 1.5]])
def test_bad_indices_raise(uniform, frame_buffer, red_program, big_triangle, indices):
    with pytest.raises(IndexOutOfRange):
        red_program.render(uniform, big_triangle, indices, frame_buffer)
    assert np.all(frame_buffer.color == 255)


def test_validate_indices_coerces_numpy_ints():
    assert validate_indices(np.array([2, 0, 1]), 3) == [2, 0, 1]
    with pytest.raises(IndexOutOfRange, match="out of range for 3"):
        validate_indices([float("nan")], 3)


def test_degenerate_skip_logs_and_continues(uniform, frame_buffer, big_triangle, caplog):
    verts = big_triangle + [clip(-1.0, -1.0), clip(0.0, 0.0), clip(1.0, 1.0)]
    program = flat_program(RED)

    with caplog.at_level(logging.DEBUG, logger="kestrel.program"):
        count = program.render(uniform, verts, [3, 4, 5, 0, 1, 2], frame_buffer)

    assert count > 0
    assert "skipped degenerate triangle" in caplog.text


def test_degenerate_raise(uniform, frame_buffer):
    verts = [clip(-1.0, -1.0), clip(0.0, 0.0), clip(1.0, 1.0)]
    program = flat_program(RED, degenerate=DegeneratePolicy.RAISE)

    with pytest.raises(GeometryDegenerate):
        program.render(uniform, verts, [0, 1, 2], frame_buffer)


def test_render_lines(uniform, frame_buffer, red_program):
    verts = [clip(-1.0, 0.1), clip(1.0, 0.1)]
    count = red_program.render(
        uniform, verts, [0, 1], frame_buffer, PrimitiveType.LINE
    )
    assert count == 10


def test_vertex_stage_runs_when_requested(uniform, frame_buffer, big_triangle):
    calls = []

    def vertex(va, u):
        calls.append(va)
        return va

    program = Program(vertex, constant_color_fragment(RED), alpha_over_depth_blend)
    program.render(uniform, big_triangle, [0, 1, 2], frame_buffer, transform_vertices=True)
    assert len(calls) == 3


def test_vertex_stage_failure_is_wrapped(uniform, frame_buffer, big_triangle):
    def vertex(va, u):
        raise RuntimeError("boom")

    program = Program(vertex, constant_color_fragment(RED), alpha_over_depth_blend)

    with pytest.raises(ShaderStageFailure, match="vertex stage failed") as exc:
        program.render(
            uniform, big_triangle, [0, 1, 2], frame_buffer, transform_vertices=True
        )
    assert exc.value.stage == "vertex"
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_fragment_stage_failure_is_wrapped(uniform, frame_buffer, big_triangle):
    def fragment(va, u):
        raise ZeroDivisionError("nope")

    program = Program(identity_vertex, fragment, alpha_over_depth_blend)

    with pytest.raises(ShaderStageFailure) as exc:
        program.render(uniform, big_triangle, [0, 1, 2], frame_buffer)
    assert exc.value.stage == "fragment"
    assert isinstance(exc.value.__cause__, ZeroDivisionError)


def test_blending_stage_must_return_cell(uniform, frame_buffer, big_triangle):
    program = Program(
        identity_vertex,
        constant_color_fragment(RED),
        lambda fa, previous: None,
    )

    with pytest.raises(ShaderStageFailure, match="expected FrameBufferAttributes"):
        program.render(uniform, big_triangle, [0, 1, 2], frame_buffer)
