"""Shared constants and enumerations for the receiver pipeline."""

from __future__ import annotations

import enum

WAVE_RATE = 16000
WAVE_BATCH = WAVE_RATE // 8
AGC_EXTRA = 100
WAVE_LEN = 2 * WAVE_BATCH + AGC_EXTRA
MP3_RATE = 8000
MAX_SHOUT_QUEUELEN = 32768
TAG_QUEUE_LEN = 16

MIN_FFT_SIZE_LOG = 8
DEFAULT_FFT_SIZE_LOG = 9
MAX_FFT_SIZE_LOG = 13
DEFAULT_FFT_SIZE = 1 << DEFAULT_FFT_SIZE_LOG

MIN_BUF_SIZE = 2560000
DEFAULT_SAMPLE_RATE = 2560000

FFT_BATCH = 1
LAMEBUF_SIZE = 22000
MIX_DIVISOR = 2

SYSCONFDIR = "/usr/local/etc"
CFGFILE = SYSCONFDIR + "/rtl_airband.conf"
PIDFILE = "/run/rtl_airband.pid"

PULSE_STREAM_LATENCY_LIMIT = 10000000


class Status(str, enum.Enum):
    """Per-channel activity indicator, valued by its display symbol."""

    NO_SIGNAL = " "
    SIGNAL = "*"
    AFC_UP = "<"
    AFC_DOWN = ">"


class MixMode(enum.Enum):
    """Channel layout of an output."""

    MONO = 0
    STEREO = 1


class Modulation(enum.Enum):
    """Demodulation scheme of a frequency."""

    AM = 0
    NFM = 1


class InputState(enum.Enum):
    """Lifecycle state of an input device."""

    UNKNOWN = enum.auto()
    INITIALIZED = enum.auto()
    RUNNING = enum.auto()
    FAILED = enum.auto()
    STOPPED = enum.auto()
    DISABLED = enum.auto()