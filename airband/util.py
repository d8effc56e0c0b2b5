"""Frequency tag queue, sine/cosine table and small conversion helpers."""

from __future__ import annotations

import logging
import math
import re
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from .constants import TAG_QUEUE_LEN

_log = logging.getLogger(__name__)

_PHASE_MAX = 0xFFFFFF
_LUT_SIZE = 256

_FLOAT_PREFIX = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

_SUFFIX_SCALE = {
    "k": 1e3,
    "K": 1e3,
    "m": 1e6,
    "M": 1e6,
    "g": 1e9,
    "G": 1e9,
}


@dataclass(frozen=True)
class FreqTag:
    """Index of a scanned frequency and the time its squelch opened."""

    freq: int
    timestamp: float


class TagQueue:
    """Thread-safe ring of frequency tags, holding at most TAG_QUEUE_LEN - 1."""

    def __init__(self) -> None:
        self._entries: list[Optional[FreqTag]] = [None] * TAG_QUEUE_LEN
        self._head = 0
        self._tail = 0
        self._lock = threading.Lock()

    def put(self, freq: int, timestamp: float) -> None:
        """Append a tag, dropping the oldest one when the ring is full."""
        with self._lock:
            self._head = (self._head + 1) % TAG_QUEUE_LEN
            if self._head == self._tail:
                _log.warning("tag queue overrun")
                self._tail = (self._tail + 1) % TAG_QUEUE_LEN
            self._entries[self._head] = FreqTag(freq, timestamp)

    def peek(self) -> Optional[FreqTag]:
        """Return the oldest tag without removing it, or None when empty."""
        with self._lock:
            if self._head == self._tail:
                return None
            return self._entries[(self._tail + 1) % TAG_QUEUE_LEN]

    def advance(self) -> None:
        """Drop the oldest tag."""
        with self._lock:
            self._tail = (self._tail + 1) % TAG_QUEUE_LEN


class SinCosTable:
    """Interpolated sine/cosine lookup over a 24-bit phase."""

    def __init__(self) -> None:
        angles = [2.0 * math.pi * i / _LUT_SIZE for i in range(_LUT_SIZE)]
        self._sin = [math.sin(a) for a in angles]
        self._cos = [math.cos(a) for a in angles]
        self._sin.append(self._sin[0])
        self._cos.append(self._cos[0])

    def lookup(self, phi: int) -> tuple[float, float]:
        """Return (sine, cosine) for ``phi`` in 0..0xFFFFFF, one full turn."""
        if not 0 <= phi <= _PHASE_MAX:
            raise ValueError(f"phase {phi} outside 0..{_PHASE_MAX:#x}")
        idx = phi >> 16
        fract = (phi & 0xFFFF) / 65536.0
        s1, s2 = self._sin[idx], self._sin[idx + 1]
        c1, c2 = self._cos[idx], self._cos[idx + 1]
        return s1 + (s2 - s1) * fract, c1 + (c2 - c1) * fract


def _leading_float(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(0)) if match else 0.0


def parse_scaled(text: str) -> float:
    """Parse a number with an optional k/M/G suffix, e.g. ``"118.5M"``."""
    if not text:
        raise ValueError("empty number")
    scale = _SUFFIX_SCALE.get(text[-1])
    if scale is None:
        return _leading_float(text)
    return scale * _leading_float(text[:-1])


def delta_sec(
    start: Union[float, datetime], stop: Union[float, datetime]
) -> float:
    """Seconds elapsed from ``start`` to ``stop``."""
    if isinstance(start, datetime) and isinstance(stop, datetime):
        return (stop - start).total_seconds()
    return float(stop) - float(start)


def dbfs_offset(fft_size: int) -> float:
    """Offset between a level normalised to 1 and dBFS for an FFT size."""
    return 7.54 + 10.0 * math.log10(fft_size // 2) - 2.38


def dbfs_to_level(dbfs: float, fft_size: int) -> float:
    """Convert dBFS to a raw FFT bin level."""
    return 10.0 ** ((dbfs - dbfs_offset(fft_size)) / 20.0) * fft_size


def level_to_dbfs(level: float, fft_size: int) -> float:
    """Convert a raw FFT bin level to dBFS, never above 0."""
    if level <= 0.0:
        return -math.inf
    return min(0.0, 20.0 * math.log10(level / fft_size) + dbfs_offset(fft_size))