"""Tests for color ramps."""

import numpy as np
import pytest

BLACK = (0.0, 0.0, 0.0, 1.0)
WHITE = (1.0, 1.0, 1.0, 1.0)
RED = (1.0, 0.0, 0.0, 1.0)
GREEN = (0.0, 1.0, 0.0, 1.0)
BLUE = (0.0, 0.0, 1.0, 1.0)


def _ramp(pairs, mode="blend"):
    from planetforge.gradient import ColorRamp
    return ColorRamp.from_pairs(pairs, mode=mode)


def test_boundaries_exact():
    ramp = _ramp([(0.0, "#102030"), (0.5, "#808080"), (1.0, "#f0e0d0")])
    assert ramp.evaluate(0.0) == ramp.stops[0].color
    assert ramp.evaluate(1.0) == ramp.stops[-1].color


def test_clamps_outside_unit_range():
    ramp = _ramp([(0.0, BLACK), (1.0, WHITE)])
    assert ramp.evaluate(-0.3) == BLACK
    assert ramp.evaluate(1.0000001) == WHITE
    assert ramp.evaluate(7.0) == WHITE


def test_no_extrapolation_beyond_stops():
    ramp = _ramp([(0.2, RED), (0.8, BLUE)])
    assert ramp.evaluate(0.0) == RED
    assert ramp.evaluate(0.1) == RED
    assert ramp.evaluate(0.9) == BLUE
    assert ramp.evaluate(1.0) == BLUE


def test_linear_interpolation():
    ramp = _ramp([(0.0, BLACK), (1.0, WHITE)])
    np.testing.assert_allclose(ramp.evaluate(0.25), (0.25, 0.25, 0.25, 1.0))

    ramp = _ramp([(0.0, RED), (0.5, GREEN), (1.0, BLUE)])
    np.testing.assert_allclose(ramp.evaluate(0.25), (0.5, 0.5, 0.0, 1.0))
    np.testing.assert_allclose(ramp.evaluate(0.75), (0.0, 0.5, 0.5, 1.0))


def test_alpha_is_interpolated():
    ramp = _ramp([(0.0, (0.0, 0.0, 0.0, 0.0)), (1.0, WHITE)])
    assert ramp.evaluate(0.5)[3] == pytest.approx(0.5)


def test_array_evaluation():
    ramp = _ramp([(0.0, BLACK), (1.0, WHITE)])
    t = np.array([[0.0, 0.5], [1.0, 0.25]])
    out = ramp.evaluate(t)
    assert out.shape == (2, 2, 4)
    np.testing.assert_allclose(out[..., 0], t)
    np.testing.assert_allclose(out[..., 3], 1.0)


def test_single_stop_is_constant():
    ramp = _ramp([(0.5, GREEN)])
    for t in (0.0, 0.5, 1.0):
        assert ramp.evaluate(t) == GREEN


def test_fixed_mode_steps():
    ramp = _ramp([(0.0, RED), (0.5, GREEN), (1.0, BLUE)], mode="fixed")
    assert ramp.evaluate(0.0) == RED
    assert ramp.evaluate(0.25) == GREEN
    assert ramp.evaluate(0.5) == GREEN
    assert ramp.evaluate(0.75) == BLUE
    assert ramp.evaluate(1.5) == BLUE


def test_empty_ramp_rejected():
    from planetforge.errors import InvalidParameterError
    from planetforge.gradient import ColorRamp
    with pytest.raises(InvalidParameterError) as exc:
        ColorRamp(())
    assert exc.value.field == "color_ramp"


def test_decreasing_positions_rejected():
    from planetforge.errors import InvalidParameterError
    with pytest.raises(InvalidParameterError):
        _ramp([(0.6, BLACK), (0.4, WHITE)])


def test_equal_positions_allowed():
    ramp = _ramp([(0.0, BLACK), (0.5, BLACK), (0.5, WHITE), (1.0, WHITE)])
    assert ramp.evaluate(0.25) == BLACK
    assert ramp.evaluate(0.75) == WHITE


def test_unknown_mode_rejected():
    from planetforge.errors import InvalidParameterError
    with pytest.raises(InvalidParameterError):
        _ramp([(0.0, BLACK)], mode="smooth")


@pytest.mark.parametrize("color, expected", [
    ("#ff0000", (1.0, 0.0, 0.0, 1.0)),
    ("white", (1.0, 1.0, 1.0, 1.0)),
    ((0, 0, 255), (0.0, 0.0, 1.0, 1.0)),
    ((255, 0, 0, 0), (1.0, 0.0, 0.0, 0.0)),
    ((0.5, 0.25, 1.0), (0.5, 0.25, 1.0, 1.0)),
])
def test_to_rgba(color, expected):
    from planetforge.gradient import to_rgba
    assert to_rgba(color) == expected


@pytest.mark.parametrize("color", ["not-a-color", (1, 2), (0.5, 2.0, 0.1)])
def test_to_rgba_rejects(color):
    from planetforge.errors import InvalidParameterError
    from planetforge.gradient import to_rgba
    with pytest.raises(InvalidParameterError):
        to_rgba(color)


def test_parse_stop():
    from planetforge.gradient import parse_stop
    assert parse_stop("0.35:#c2b280") == (0.35, "#c2b280")
    assert parse_stop("1: white") == (1.0, "white")


@pytest.mark.parametrize("text", ["0.5", "abc:#ffffff", "0.5:"])
def test_parse_stop_rejects(text):
    from planetforge.errors import InvalidParameterError
    from planetforge.gradient import parse_stop
    with pytest.raises(InvalidParameterError):
        parse_stop(text)


def test_presets_build():
    from planetforge.gradient import PRESETS, preset
    for name in PRESETS:
        ramp = preset(name)
        assert ramp.stops[0].position == 0.0
        assert ramp.stops[-1].position == 1.0


def test_unknown_preset():
    from planetforge.errors import InvalidParameterError
    from planetforge.gradient import preset
    with pytest.raises(InvalidParameterError):
        preset("mars")
