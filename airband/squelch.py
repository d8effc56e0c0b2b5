"""Adaptive squelch with noise-floor tracking, flap detection and delays."""

from __future__ import annotations

from .squelch_state import MovingAverage, SquelchState

_NOISE_DECAY_FACTOR = 0.97
_NOISE_NEW_FACTOR = 1.0 - _NOISE_DECAY_FACTOR

# Specific to the 2nd order lowpass Bessel filter applied upstream.
_BUFFER_SIZE = 102


class Squelch:
    """Decides per sample whether a channel carries a signal worth passing on.

    The squelch moves between CLOSED, OPENING, OPEN, CLOSING and
    LOW_SIGNAL_ABORT. Audio passes while OPEN or CLOSING. The threshold
    follows an automatically tracked noise floor unless a manual level is set.
    """

    def __init__(self) -> None:
        self._noise_floor = 5.0
        self._manual_signal_level = -1.0
        self._using_manual_level = False
        self._normal_signal_ratio = 0.0
        self._flappy_signal_ratio = 0.0
        self._moving_avg_cap = 0.0
        self.set_squelch_snr_threshold(9.54)

        self._pre_filter = MovingAverage(0.001, 0.001)
        self._post_filter = MovingAverage(0.001, 0.001)

        self._squelch_level = 0.0

        self._using_post_filter = False
        self._pre_vs_post_factor = 0.9

        self._open_delay = 197
        self._close_delay = 197
        self._low_signal_abort = 88

        self._next_state = SquelchState.CLOSED
        self._current_state = SquelchState.CLOSED

        self._delay = 0
        self._open_count = 0
        self._sample_count = -1
        self._flappy_count = 0
        self._low_signal_count = 0

        self._recent_sample_size = 1000
        self._flap_opens_threshold = 3
        self._recent_open_count = 0
        self._closed_sample_count = 0

        self._buffer_size = _BUFFER_SIZE
        self._buffer_head = 0
        self._buffer_tail = 1
        self._buffer = [0.0] * self._buffer_size

        assert self._open_delay > self._buffer_size

    # Configuration

    def set_squelch_level_threshold(self, level: float) -> None:
        """Use a fixed signal level as threshold; a level <= 0 reverts to automatic."""
        if level > 0:
            self._using_manual_level = True
            self._manual_signal_level = level
        else:
            self._using_manual_level = False
        self._calculate_moving_avg_cap()

    def set_squelch_snr_threshold(self, db: float) -> None:
        """Use a signal-to-noise ratio in dB above the noise floor as threshold."""
        self._using_manual_level = False
        self._normal_signal_ratio = 10.0 ** (db / 20.0)
        self._flappy_signal_ratio = self._normal_signal_ratio * 0.9
        self._calculate_moving_avg_cap()

    # Queries

    def is_open(self) -> bool:
        """True while audio should be passed through."""
        return self._current_state in (SquelchState.OPEN, SquelchState.CLOSING)

    def should_filter_sample(self) -> bool:
        """True when the caller should provide filtered samples."""
        return (
            self._has_pre_filter_signal() or self._current_state != SquelchState.CLOSED
        ) and self._current_state != SquelchState.LOW_SIGNAL_ABORT

    def should_process_audio(self) -> bool:
        """True when the caller should demodulate audio."""
        return self._current_state in (SquelchState.OPEN, SquelchState.CLOSING)

    def first_open_sample(self) -> bool:
        """True on the sample at which the squelch is about to open."""
        return (
            self._current_state != SquelchState.OPEN
            and self._next_state == SquelchState.OPEN
        )

    def last_open_sample(self) -> bool:
        """True on the sample at which the squelch is about to close."""
        return (
            self._current_state == SquelchState.CLOSING
            and self._next_state == SquelchState.CLOSED
        ) or (
            self._current_state != SquelchState.LOW_SIGNAL_ABORT
            and self._next_state == SquelchState.LOW_SIGNAL_ABORT
        )

    def signal_outside_filter(self) -> bool:
        """True when there is signal before filtering but not after it."""
        return (
            self._using_post_filter
            and self._has_pre_filter_signal()
            and not self._has_post_filter_signal()
        )

    def noise_level(self) -> float:
        """Current noise floor estimate."""
        return self._noise_floor

    def signal_level(self) -> float:
        """Current uncapped average signal level."""
        return self._pre_filter.full

    def squelch_level(self) -> float:
        """Signal level needed for the squelch to open."""
        if self._using_manual_level:
            return self._manual_signal_level
        if self._squelch_level == 0.0:
            if (
                self._currently_flapping()
                and self._flappy_signal_ratio < self._normal_signal_ratio
            ):
                self._squelch_level = self._flappy_signal_ratio * self._noise_floor
            else:
                self._squelch_level = self._normal_signal_ratio * self._noise_floor
        return self._squelch_level

    def open_count(self) -> int:
        """Number of times the squelch has opened."""
        return self._open_count

    def flappy_count(self) -> int:
        """Number of opens that happened while flapping."""
        return self._flappy_count

    # Sample processing

    def process_raw_sample(self, sample: float) -> None:
        """Feed one unfiltered signal-level sample."""
        self._update_current_state()

        self._sample_count += 1

        # Updating every 16 samples lets a gradually rising signal cross the
        # threshold sooner, while still following sustained noise increases.
        if self._sample_count % 16 == 0:
            self._calculate_noise_floor()

        self._pre_filter.update(sample, self._moving_avg_cap)

        # Stored scaled so it can later serve as the post-filter threshold.
        self._buffer[self._buffer_head] = (
            self._pre_filter.capped * self._pre_vs_post_factor
        )

        if self._current_state == SquelchState.OPEN and not self._has_signal():
            self._set_state(SquelchState.CLOSING)

        if self._current_state == SquelchState.CLOSED and self._has_signal():
            self._set_state(SquelchState.OPENING)

        if self._current_state not in (
            SquelchState.CLOSED,
            SquelchState.LOW_SIGNAL_ABORT,
        ):
            if sample >= self.squelch_level():
                self._low_signal_count = 0
            else:
                self._low_signal_count += 1
                if self._low_signal_count >= self._low_signal_abort:
                    self._set_state(SquelchState.LOW_SIGNAL_ABORT)

    def process_filtered_sample(self, sample: float) -> None:
        """Feed one signal-level sample taken after channel filtering."""
        if not self.should_filter_sample():
            return

        if self._current_state == SquelchState.OPENING:
            # Wait until the pre-filter value has passed through the buffer.
            if self._delay < self._buffer_size:
                return
            if self._delay == self._buffer_size:
                value = self._buffer[self._buffer_tail]
                self._post_filter = MovingAverage(value, value)

        self._using_post_filter = True
        self._post_filter.update(sample, self._moving_avg_cap)

        if self._post_filter.capped < self._buffer[self._buffer_tail]:
            self._set_state(SquelchState.CLOSED)

    # Internals

    def _set_state(self, update: SquelchState) -> None:
        current = self._current_state
        if current == SquelchState.CLOSED and update in (
            SquelchState.CLOSING,
            SquelchState.LOW_SIGNAL_ABORT,
        ):
            update = SquelchState.CLOSED
        elif current == SquelchState.CLOSED and update == SquelchState.OPEN:
            update = SquelchState.OPENING
        elif (
            current == SquelchState.OPENING
            and update == SquelchState.LOW_SIGNAL_ABORT
        ):
            update = SquelchState.CLOSED
        elif current == SquelchState.LOW_SIGNAL_ABORT and update not in (
            SquelchState.LOW_SIGNAL_ABORT,
            SquelchState.CLOSED,
        ):
            update = SquelchState.CLOSED
        elif current == SquelchState.OPEN and update == SquelchState.CLOSED:
            update = SquelchState.CLOSING
        elif current == SquelchState.OPEN and update == SquelchState.OPENING:
            update = SquelchState.OPEN
        self._next_state = update

    def _update_current_state(self) -> None:
        nxt = self._next_state
        cur = self._current_state

        if nxt == SquelchState.OPENING:
            if cur != SquelchState.OPENING:
                self._delay = 0
                self._low_signal_count = 0
                self._using_post_filter = False
                self._current_state = nxt
            else:
                self._delay += 1
                if self._delay >= self._open_delay:
                    # Count as an open for flap detection even if the signal is gone.
                    if self._closed_sample_count < self._recent_sample_size:
                        self._recent_open_count += 1
                        if self._currently_flapping():
                            self._flappy_count += 1
                        self._squelch_level = 0.0
                    if self._has_signal():
                        self._next_state = SquelchState.OPEN
                    else:
                        self._next_state = SquelchState.CLOSED
        elif nxt == SquelchState.CLOSING:
            if cur != SquelchState.CLOSING:
                self._delay = 0
                self._current_state = nxt
            else:
                self._delay += 1
                if self._delay >= self._close_delay:
                    if not self._has_signal():
                        self._next_state = SquelchState.CLOSED
                    else:
                        # Set current too so the reopen is not counted again.
                        self._current_state = SquelchState.OPEN
                        self._next_state = SquelchState.OPEN
        elif nxt == SquelchState.LOW_SIGNAL_ABORT:
            if cur != SquelchState.LOW_SIGNAL_ABORT:
                # Coming from CLOSING keeps the delay counter already running.
                if cur != SquelchState.CLOSING:
                    self._delay = 0
                self._current_state = nxt
            else:
                self._delay += 1
                if self._delay >= self._close_delay:
                    self._next_state = SquelchState.CLOSED
        elif nxt == SquelchState.OPEN and cur != SquelchState.OPEN:
            self._open_count += 1
            self._current_state = nxt
        elif nxt == SquelchState.CLOSED and cur != SquelchState.CLOSED:
            self._using_post_filter = False
            self._closed_sample_count = 0
            self._current_state = nxt
        elif nxt == SquelchState.CLOSED and cur == SquelchState.CLOSED:
            if self._closed_sample_count < self._recent_sample_size:
                self._closed_sample_count += 1
            elif self._closed_sample_count == self._recent_sample_size:
                self._recent_open_count = 0
                self._squelch_level = 0.0
        else:
            self._current_state = nxt

        self._buffer_tail = (self._buffer_tail + 1) % self._buffer_size
        self._buffer_head = (self._buffer_head + 1) % self._buffer_size

    def _has_pre_filter_signal(self) -> bool:
        return self._pre_filter.capped >= self.squelch_level()

    def _has_post_filter_signal(self) -> bool:
        return (
            self._using_post_filter
            and self._post_filter.capped >= self._buffer[self._buffer_tail]
        )

    def _has_signal(self) -> bool:
        if self._using_post_filter:
            return self._has_pre_filter_signal() and self._has_post_filter_signal()
        return self._has_pre_filter_signal()

    def _calculate_noise_floor(self) -> None:
        self._noise_floor = (
            self._noise_floor * _NOISE_DECAY_FACTOR
            + min(self._pre_filter.capped, self._noise_floor) * _NOISE_NEW_FACTOR
            + 1e-6
        )
        self._calculate_moving_avg_cap()
        self._squelch_level = 0.0

    def _calculate_moving_avg_cap(self) -> None:
        if self._using_manual_level:
            self._moving_avg_cap = 1.5 * self._manual_signal_level
        else:
            self._moving_avg_cap = 1.5 * self._normal_signal_ratio * self._noise_floor

    def _currently_flapping(self) -> bool:
        return self._recent_open_count >= self._flap_opens_threshold