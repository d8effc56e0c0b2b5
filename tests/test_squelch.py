import pytest

from airband.squelch import Squelch

RAW_NO_SIGNAL = 0.05
RAW_SIGNAL = 0.75


def _lower_noise_floor(squelch):
    while squelch.noise_level() > 1.01 * RAW_NO_SIGNAL:
        squelch.process_raw_sample(RAW_NO_SIGNAL)
    assert squelch.noise_level() <= 1.01 * RAW_NO_SIGNAL
    assert RAW_SIGNAL > squelch.squelch_level()


def _open(squelch):
    for _ in range(500):
        if squelch.is_open():
            break
        squelch.process_raw_sample(RAW_SIGNAL)
    assert squelch.is_open()


def test_default_object():
    squelch = Squelch()
    assert squelch.open_count() == 0
    assert squelch.flappy_count() == 0
    assert not squelch.is_open()


def test_default_squelch_level():
    squelch = Squelch()
    assert squelch.noise_level() == 5.0
    assert squelch.squelch_level() == pytest.approx(14.996, rel=1e-3)


def test_noise_floor():
    squelch = Squelch()
    assert squelch.noise_level() > 10.0 * RAW_NO_SIGNAL

    this_level = squelch.noise_level()
    for _ in range(5000):
        last_level = this_level
        for _ in range(25):
            squelch.process_raw_sample(RAW_NO_SIGNAL)
        this_level = squelch.noise_level()
        assert this_level <= last_level + 1e-12
        if last_level - this_level < 1e-12:
            break

    assert squelch.noise_level() < 1.01 * RAW_NO_SIGNAL


def test_normal_operation():
    squelch = Squelch()
    _lower_noise_floor(squelch)

    _open(squelch)
    assert squelch.should_process_audio()

    for _ in range(1000):
        squelch.process_raw_sample(RAW_SIGNAL)
    assert squelch.is_open()
    assert squelch.should_process_audio()

    for _ in range(100):
        if not squelch.is_open():
            break
        squelch.process_raw_sample(RAW_NO_SIGNAL)
    assert not squelch.is_open()
    assert not squelch.should_process_audio()
    assert squelch.open_count() == 1


def test_dead_spot():
    squelch = Squelch()
    _lower_noise_floor(squelch)

    _open(squelch)
    assert squelch.should_process_audio()

    for _ in range(1000):
        squelch.process_raw_sample(RAW_SIGNAL)
    assert squelch.is_open()
    assert squelch.should_process_audio()

    for _ in range(50):
        squelch.process_raw_sample(RAW_NO_SIGNAL)
        assert squelch.is_open()
        assert squelch.should_process_audio()

    for _ in range(1000):
        squelch.process_raw_sample(RAW_SIGNAL)
        assert squelch.is_open()
        assert squelch.should_process_audio()


def test_should_process_audio():
    squelch = Squelch()
    _lower_noise_floor(squelch)

    for _ in range(500):
        if squelch.is_open():
            break
        assert not squelch.should_process_audio()
        squelch.process_raw_sample(RAW_SIGNAL)
    assert squelch.is_open()
    assert squelch.should_process_audio()

    for _ in range(100):
        if not squelch.is_open():
            break
        assert squelch.should_process_audio()
        squelch.process_raw_sample(RAW_NO_SIGNAL)
    assert not squelch.is_open()
    assert not squelch.should_process_audio()


def test_first_open_sample_seen_once():
    squelch = Squelch()
    _lower_noise_floor(squelch)
    first_flags = []
    for _ in range(500):
        if squelch.is_open():
            break
        squelch.process_raw_sample(RAW_SIGNAL)
        first_flags.append(squelch.first_open_sample())
    assert squelch.is_open()
    assert sum(first_flags) == 1


def test_last_open_sample_seen_on_close():
    squelch = Squelch()
    _lower_noise_floor(squelch)
    _open(squelch)
    for _ in range(500):
        squelch.process_raw_sample(RAW_SIGNAL)
    seen_last = False
    for _ in range(500):
        squelch.process_raw_sample(RAW_NO_SIGNAL)
        seen_last = seen_last or squelch.last_open_sample()
    assert seen_last
    assert not squelch.is_open()


def test_manual_level_threshold():
    squelch = Squelch()
    squelch.set_squelch_level_threshold(0.3)
    assert squelch.squelch_level() == 0.3
    squelch.set_squelch_level_threshold(0)
    assert squelch.squelch_level() == pytest.approx(14.996, rel=1e-3)


def test_manual_level_blocks_weak_signal():
    squelch = Squelch()
    squelch.set_squelch_level_threshold(1.0)
    for _ in range(2000):
        squelch.process_raw_sample(RAW_SIGNAL)
    assert not squelch.is_open()
    assert squelch.open_count() == 0


def test_snr_threshold_20db():
    squelch = Squelch()
    squelch.set_squelch_snr_threshold(20.0)
    # squelch level is cached until the next noise floor update
    squelch.process_raw_sample(RAW_NO_SIGNAL)
    assert squelch.squelch_level() == pytest.approx(10.0 * squelch.noise_level())


def test_signal_level_rises_with_input():
    squelch = Squelch()
    start = squelch.signal_level()
    for _ in range(100):
        squelch.process_raw_sample(RAW_SIGNAL)
    assert start == pytest.approx(0.001)
    assert start < squelch.signal_level() < RAW_SIGNAL


def test_filtered_signal_missing_closes_squelch():
    squelch = Squelch()
    _lower_noise_floor(squelch)
    _open(squelch)
    squelch.process_raw_sample(RAW_SIGNAL)
    squelch.process_filtered_sample(0.0)
    assert squelch.signal_outside_filter()
    for _ in range(500):
        if not squelch.is_open():
            break
        squelch.process_raw_sample(RAW_SIGNAL)
        squelch.process_filtered_sample(0.0)
    assert not squelch.is_open()


def test_should_filter_sample_when_closed_and_quiet():
    squelch = Squelch()
    _lower_noise_floor(squelch)
    assert not squelch.should_filter_sample()
    for _ in range(200):
        squelch.process_raw_sample(RAW_SIGNAL)
    assert squelch.should_filter_sample()