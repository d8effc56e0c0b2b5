"""Signal helpers: complex math, FM discriminators, window and sample scales."""

from __future__ import annotations

import math

from .constants import WAVE_RATE

_PI_4 = math.pi / 4
_PI_3_4 = 3 * math.pi / 4

_BLACKMAN7 = (
    0.27105140069342,
    0.43329793923448,
    0.21812299954311,
    0.06592544638803,
    0.01081174209837,
    0.00077658482522,
    0.00001388721735,
)


def multiply(ar: float, aj: float, br: float, bj: float) -> tuple[float, float]:
    """Complex product of (ar + j*aj) and (br + j*bj) as (real, imag)."""
    return ar * br - aj * bj, aj * br + ar * bj


def fast_atan2(y: float, x: float) -> float:
    """Cheap approximation of atan2, exact on the axes and diagonals."""
    if x == 0.0 and y == 0.0:
        return 0.0
    yabs = abs(y)
    if x >= 0.0:
        angle = _PI_4 - _PI_4 * (x - yabs) / (x + yabs)
    else:
        angle = _PI_3_4 - _PI_4 * (x + yabs) / (yabs - x)
    return -angle if y < 0.0 else angle


def polar_disc_fast(ar: float, aj: float, br: float, bj: float) -> float:
    """Phase difference of a relative to b, scaled to -1..1."""
    cr, cj = multiply(ar, aj, br, -bj)
    return fast_atan2(cj, cr) / math.pi


def fm_quadri_demod(ar: float, aj: float, br: float, bj: float) -> float:
    """Quadrature correlator FM discriminator."""
    return (br * aj - ar * bj) / (ar * ar + aj * aj + 1.0) / math.pi


def blackman7_window(size: int) -> list[float]:
    """Seven-term Blackman-Harris window of ``size`` points."""
    if size < 2:
        raise ValueError("window size must be at least 2")
    span = size - 1
    window = []
    for i in range(size):
        x = 0.0
        for k, coeff in enumerate(_BLACKMAN7):
            term = coeff * math.cos(2.0 * k * math.pi * i / span)
            x += -term if k % 2 else term
        window.append(x)
    return window


def sample_levels(signed: bool) -> list[float]:
    """Map each 8-bit sample byte to a float in about -1..1."""
    if not signed:
        return [(i - 127.5) / 127.5 for i in range(256)]
    return [(i - 256 if i >= 128 else i) / 128.0 for i in range(256)]


def deemphasis_alpha(tau_us: int = 200) -> float:
    """NFM de-emphasis filter coefficient for a time constant in microseconds."""
    if tau_us == 0:
        return 0.0
    return math.exp(-1.0 / (WAVE_RATE * 1e-6 * tau_us))


def next_device(current: int, start: int, end: int) -> int:
    """Next device index in the half-open range start..end, wrapping round."""
    current += 1
    return current if current < end else start