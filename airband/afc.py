"""Automatic frequency correction: follow a signal to a neighbouring FFT bin."""

from __future__ import annotations

from typing import Sequence

from .constants import Status


class Afc:
    """One AFC decision for a channel over one output batch.

    Create it with the channel status from before the batch was demodulated.
    Then call :meth:`finalize` with the status and spectrum from after it.
    When the squelch has just opened, the channel's bin is moved towards the
    strongest neighbouring bin. When it has just closed, the bin goes back
    to its base.
    """

    def __init__(self, prev_status: Status) -> None:
        self._prev_status = Status(prev_status)

    @staticmethod
    def _check(
        power: Sequence[float], base: int, base_value: float, afc_level: int, step: int
    ) -> int:
        size = len(power)
        threshold = 0.0
        bin_ = base
        while True:
            if step < 0:
                if bin_ < -step:
                    break
            elif bin_ + step >= size:
                break
            value = power[bin_ + step]
            if value <= base_value:
                break
            if bin_ == base:
                threshold = (value - base_value) / afc_level
            else:
                if value - base_value < threshold:
                    break
                threshold += threshold / 10.0
            bin_ += step
        return bin_

    def finalize(
        self,
        afc_level: int,
        status: Status,
        power: Sequence[float],
        base_bin: int,
        current_bin: int,
    ) -> tuple[int, Status]:
        """Return the channel's new ``(bin, status)``.

        ``afc_level`` ranges from 0 (disabled) to 255 (most aggressive).
        ``power`` holds the squared magnitude of every FFT bin.
        """
        if not 0 <= afc_level <= 255:
            raise ValueError(f"AFC level {afc_level} outside 0..255")
        status = Status(status)
        if afc_level == 0:
            return current_bin, status

        if status != Status.NO_SIGNAL and self._prev_status == Status.NO_SIGNAL:
            base_value = power[base_bin]
            bin_ = self._check(power, base_bin, base_value, afc_level, -1)
            if bin_ == base_bin:
                bin_ = self._check(power, base_bin, base_value, afc_level, 1)
            if bin_ != current_bin:
                if bin_ > base_bin:
                    status = Status.AFC_UP
                elif bin_ < base_bin:
                    status = Status.AFC_DOWN
                return bin_, status
            return current_bin, status

        if status == Status.NO_SIGNAL and self._prev_status != Status.NO_SIGNAL:
            return base_bin, status

        return current_bin, status