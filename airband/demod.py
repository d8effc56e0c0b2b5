"""Per-channel processing of one output batch: squelch, AGC and demodulation."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Optional

from .constants import AGC_EXTRA, WAVE_BATCH, WAVE_LEN, MixMode, Modulation, Status
from .dsp import deemphasis_alpha, fm_quadri_demod, multiply, polar_disc_fast
from .squelch import Squelch
from .util import SinCosTable

_PHASE_MASK = 0xFFFFFF


class FmDemod(enum.Enum):
    """FM discriminator used for NFM channels."""

    FAST_ATAN2 = enum.auto()
    QUADRI_DEMOD = enum.auto()


@dataclass
class Frequency:
    """One frequency of a channel with its own squelch and AGC state."""

    frequency: int
    label: Optional[str] = None
    agcavgfast: float = 0.5
    ampfactor: float = 1.0
    squelch: Squelch = field(default_factory=Squelch)
    active_counter: int = 0
    modulation: Modulation = Modulation.AM


def _zeros(count: int) -> list[float]:
    return [0.0] * count


@dataclass
class Channel:
    """Sample buffers and demodulator state of one receiver channel.

    ``wavein`` holds bin magnitudes, ``iq_in`` the raw bin values as
    interleaved I/Q pairs. New samples of a batch go to
    ``wavein[AGC_EXTRA:AGC_EXTRA + WAVE_BATCH]`` and the matching pairs of
    ``iq_in``; the preceding ``AGC_EXTRA`` samples are kept from the last batch.
    """

    freqlist: list[Frequency] = field(default_factory=list)
    freq_idx: int = 0
    mode: MixMode = MixMode.MONO
    axcindicate: Status = Status.NO_SIGNAL
    afc: int = 0
    needs_raw_iq: bool = False
    has_iq_outputs: bool = False
    dm_dphi: int = 0
    dm_phi: int = 0
    pr: float = 0.0
    pj: float = 0.0
    prev_waveout: float = 0.0
    alpha: float = field(default_factory=deemphasis_alpha)
    highpass: int = 100
    lowpass: int = 2500
    wavein: list[float] = field(default_factory=lambda: _zeros(WAVE_LEN))
    waveout: list[float] = field(default_factory=lambda: _zeros(WAVE_LEN))
    waveout_r: list[float] = field(default_factory=lambda: _zeros(WAVE_LEN))
    iq_in: list[float] = field(default_factory=lambda: _zeros(2 * WAVE_LEN))
    iq_out: list[float] = field(default_factory=lambda: _zeros(2 * WAVE_LEN))

    def __post_init__(self) -> None:
        if not self.freqlist:
            raise ValueError("a channel needs at least one frequency")
        if not 0 <= self.freq_idx < len(self.freqlist):
            raise ValueError(f"frequency index {self.freq_idx} out of range")
        if not 0 <= self.afc <= 255:
            raise ValueError(f"AFC level {self.afc} outside 0..255")
        for name, size in (
            ("wavein", WAVE_LEN),
            ("waveout", WAVE_LEN),
            ("waveout_r", WAVE_LEN),
            ("iq_in", 2 * WAVE_LEN),
            ("iq_out", 2 * WAVE_LEN),
        ):
            if len(getattr(self, name)) != size:
                raise ValueError(f"{name} must hold {size} samples")
        self.axcindicate = Status(self.axcindicate)
        self.dm_phi &= _PHASE_MASK


def _clamp(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return max(-1.0, min(1.0, value))


def process_channel(
    channel: Channel, sincos: SinCosTable, fm_demod: FmDemod = FmDemod.FAST_ATAN2
) -> Status:
    """Demodulate one batch of ``WAVE_BATCH`` samples of ``channel``.

    Fills ``waveout`` (and ``iq_out`` when the channel has I/Q outputs),
    shifts the kept history to the front of the input buffers and returns
    the channel status, ``SIGNAL`` when the squelch was open at any sample.
    """
    fparms = channel.freqlist[channel.freq_idx]
    squelch = fparms.squelch
    wavein = channel.wavein
    waveout = channel.waveout
    iq_in = channel.iq_in
    iq_out = channel.iq_out

    channel.axcindicate = Status.NO_SIGNAL

    for j in range(AGC_EXTRA, WAVE_BATCH + AGC_EXTRA):
        idx = 2 * (j - AGC_EXTRA)
        real, imag = iq_in[idx], iq_in[idx + 1]

        squelch.process_raw_sample(wavein[j])

        if squelch.should_filter_sample() and channel.needs_raw_iq:
            # Remove the phase rotation introduced by the sliding FFT window.
            swf, cwf = sincos.lookup(channel.dm_phi)
            real, imag = multiply(real, imag, cwf, -swf)
            channel.dm_phi = (channel.dm_phi + channel.dm_dphi) & _PHASE_MASK
            iq_in[idx], iq_in[idx + 1] = real, imag
            wavein[j] = math.sqrt(real * real + imag * imag)

        if fparms.modulation == Modulation.AM:
            if squelch.first_open_sample():
                # Bootstrap the AGC with the samples preceding the opening.
                level = squelch.squelch_level()
                for k in range(j - AGC_EXTRA, j):
                    if wavein[k] >= level:
                        fparms.agcavgfast = fparms.agcavgfast * 0.9 + wavein[k] * 0.1
            elif squelch.last_open_sample():
                # Fade out the samples preceding the closing.
                for k in range(j - AGC_EXTRA + 1, j):
                    waveout[k] = waveout[k - 1] * 0.94

        out = waveout[j]

        if squelch.should_process_audio():
            if fparms.modulation == Modulation.AM:
                if wavein[j] > squelch.squelch_level():
                    fparms.agcavgfast = fparms.agcavgfast * 0.995 + wavein[j] * 0.005
                out = (wavein[j - AGC_EXTRA] - fparms.agcavgfast) / (
                    fparms.agcavgfast * 1.5
                )
                if abs(out) > 0.8:
                    out *= 0.85
                    fparms.agcavgfast *= 1.15
            elif fparms.modulation == Modulation.NFM:
                if fm_demod == FmDemod.QUADRI_DEMOD:
                    out = fm_quadri_demod(real, imag, channel.pr, channel.pj)
                else:
                    out = polar_disc_fast(real, imag, channel.pr, channel.pj)
                channel.pr, channel.pj = real, imag
                # De-emphasis IIR and DC blocking.
                fparms.agcavgfast = fparms.agcavgfast * 0.995 + out * 0.005
                out -= fparms.agcavgfast
                out = out * (1.0 - channel.alpha) + channel.prev_waveout * channel.alpha
                channel.prev_waveout = out

        if squelch.is_open():
            out = _clamp(out * fparms.ampfactor)
            channel.axcindicate = Status.SIGNAL
            if channel.has_iq_outputs:
                iq_out[idx], iq_out[idx + 1] = real, imag
        else:
            out = 0.0
            if channel.has_iq_outputs:
                iq_out[idx] = iq_out[idx + 1] = 0.0

        waveout[j] = out

    wavein[:AGC_EXTRA] = wavein[WAVE_BATCH : WAVE_BATCH + AGC_EXTRA]
    if channel.needs_raw_iq:
        iq_in[: 2 * AGC_EXTRA] = iq_in[2 * WAVE_BATCH : 2 * (WAVE_BATCH + AGC_EXTRA)]

    if channel.axcindicate != Status.NO_SIGNAL:
        fparms.active_counter += 1
    return channel.axcindicate