import math

import pytest

from airband.dsp import (
    blackman7_window,
    deemphasis_alpha,
    fast_atan2,
    fm_quadri_demod,
    multiply,
    next_device,
    polar_disc_fast,
    sample_levels,
)


@pytest.mark.parametrize("a, b", [(1 + 2j, 3 + 4j), (-0.5 + 0.25j, 2 - 1j), (0j, 1 + 1j)])
def test_multiply_matches_complex(a, b):
    cr, cj = multiply(a.real, a.imag, b.real, b.imag)
    expected = a * b
    assert cr == pytest.approx(expected.real)
    assert cj == pytest.approx(expected.imag)


def test_fast_atan2_origin():
    assert fast_atan2(0.0, 0.0) == 0.0


@pytest.mark.parametrize(
    "y, x, expected",
    [
        (1.0, 1.0, math.pi / 4),
        (-1.0, 1.0, -math.pi / 4),
        (0.0, 1.0, 0.0),
        (1.0, 0.0, math.pi / 2),
        (0.0, -1.0, math.pi),
        (1.0, -1.0, 3 * math.pi / 4),
    ],
)
def test_fast_atan2_exact_points(y, x, expected):
    assert fast_atan2(y, x) == pytest.approx(expected, abs=1e-12)


@pytest.mark.parametrize("deg", range(-175, 180, 15))
def test_fast_atan2_close_to_math(deg):
    angle = math.radians(deg)
    y, x = math.sin(angle), math.cos(angle)
    assert fast_atan2(y, x) == pytest.approx(math.atan2(y, x), abs=0.08)


def test_fast_atan2_odd_in_y():
    assert fast_atan2(-0.3, 0.7) == -fast_atan2(0.3, 0.7)


def test_polar_disc_same_vector_is_zero():
    assert polar_disc_fast(0.6, 0.8, 0.6, 0.8) == 0.0


def test_polar_disc_quarter_turn():
    assert polar_disc_fast(0.0, 1.0, 1.0, 0.0) == pytest.approx(0.5)
    assert polar_disc_fast(1.0, 0.0, 0.0, 1.0) == pytest.approx(-0.5)


def test_fm_quadri_demod_properties():
    assert fm_quadri_demod(0.6, 0.8, 0.6, 0.8) == pytest.approx(0.0, abs=1e-15)
    forward = fm_quadri_demod(0.0, 1.0, 1.0, 0.0)
    backward = fm_quadri_demod(1.0, 0.0, 0.0, 1.0)
    assert forward > 0
    assert backward == pytest.approx(-forward)


def test_window_shape():
    window = blackman7_window(513)
    assert len(window) == 513
    assert window[256] == pytest.approx(1.0, rel=1e-6)
    assert abs(window[0]) < 1e-6
    assert abs(window[-1]) < 1e-6
    assert max(window) == window[256]


def test_window_symmetric():
    window = blackman7_window(512)
    for left, right in zip(window, reversed(window)):
        assert left == pytest.approx(right, abs=1e-12)


def test_window_too_small():
    with pytest.raises(ValueError):
        blackman7_window(1)


def test_unsigned_levels():
    levels = sample_levels(False)
    assert len(levels) == 256
    assert levels[0] == pytest.approx(-1.0)
    assert levels[255] == pytest.approx(1.0)
    assert levels == sorted(levels)


def test_signed_levels():
    levels = sample_levels(True)
    assert len(levels) == 256
    assert levels[0] == 0.0
    assert levels[1] == 1 / 128
    assert levels[127] == 127 / 128
    assert levels[255] == -1 / 128
    assert all(-1.0 <= v < 1.0 for v in levels)


def test_deemphasis_alpha():
    assert deemphasis_alpha(0) == 0.0
    values = [deemphasis_alpha(t) for t in (50, 75, 200, 750)]
    assert all(0.0 < v < 1.0 for v in values)
    assert values == sorted(values)
    assert deemphasis_alpha() == deemphasis_alpha(200)


@pytest.mark.parametrize(
    "current, start, end, expected",
    [(0, 0, 3, 1), (1, 0, 3, 2), (2, 0, 3, 0), (4, 4, 5, 4), (5, 3, 7, 6)],
)
def test_next_device(current, start, end, expected):
    assert next_device(current, start, end) == expected