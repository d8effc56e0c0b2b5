# airband

Building blocks for an AM/NFM airband receiver. The package takes FFT bin
magnitudes and raw I/Q values of a channel and turns them into audio
samples. It does so with an adaptive squelch, AGC or an FM discriminator,
automatic frequency correction and clipping. It can then send the audio
over UDP.

## Modules

- `airband.squelch.Squelch`: an adaptive squelch. It tracks the noise
  floor and opens and closes after a delay. A run of low samples aborts it,
  and it detects flapping. It can also compare the level against a
  post-filter level. Feed it with `process_raw_sample` and, optionally,
  `process_filtered_sample`. Query it with `is_open`,
  `should_process_audio`, `should_filter_sample`, `first_open_sample`,
  `last_open_sample`, `signal_outside_filter`, `noise_level`,
  `signal_level`, `squelch_level`, `open_count` and `flappy_count`. The
  threshold is set either as a signal-to-noise ratio in dB
  (`set_squelch_snr_threshold`, 9.54 dB by default) or as a fixed level
  (`set_squelch_level_threshold`; a level of 0 or less goes back to
  automatic).
- `airband.squelch_state`: the squelch states (`SquelchState`) and the
  capped exponential moving average (`MovingAverage.update(sample, cap)`).
- `airband.dsp`: `multiply` (complex product), `fast_atan2`,
  `polar_disc_fast` and `fm_quadri_demod` (FM discriminators),
  `blackman7_window(size)` (seven-term Blackman-Harris window),
  `sample_levels(signed)` (8-bit sample byte to float tables),
  `deemphasis_alpha(tau_us)` (NFM de-emphasis coefficient, 200 µs by
  default) and `next_device(current, start, end)`.
- `airband.afc.Afc`: automatic frequency correction. Create it with the
  channel status from before a batch. Then `finalize(afc_level, status,
  power, base_bin, current_bin)` returns the new `(bin, status)`. When the
  squelch has just opened, the bin moves towards a stronger neighbour and
  the status becomes `AFC_UP` or `AFC_DOWN`. When it has just closed, the
  bin returns to `base_bin`.
- `airband.demod`: `Channel`, `Frequency`, `FmDemod` and
  `process_channel(channel, sincos, fm_demod)`. The function processes one
  batch of `WAVE_BATCH` samples. It fills `channel.waveout`, and
  `iq_out` when the channel has I/Q outputs. It shifts the kept history
  and returns `Status.SIGNAL` if the squelch was open at any sample, or
  `Status.NO_SIGNAL` otherwise.
- `airband.util`: `TagQueue` (a thread-safe ring of `FreqTag` entries with
  `put`, `peek` and `advance`; it holds at most 15 tags and drops the
  oldest one on overrun), `SinCosTable.lookup(phi)` (interpolated sine and
  cosine over a 24-bit phase), `parse_scaled` (numbers with a `k`, `M` or
  `G` suffix, such as `"118.5M"`), `delta_sec`, and dBFS conversion with
  `dbfs_offset`, `dbfs_to_level` and `level_to_dbfs`.
- `airband.udp_stream.UdpStream`: sends native-endian 32-bit float samples,
  mono (`write`) or interleaved stereo (`write_stereo`), to one UDP
  destination. `open` raises `OSError` when the address cannot be resolved
  or connected. It can be used as a context manager.
- `airband.constants`: `Status`, `MixMode`, `Modulation`, `InputState` and
  the sizes used throughout. The audio rate `WAVE_RATE` is 16000 Hz, a
  batch is `WAVE_BATCH` = 2000 samples, and `AGC_EXTRA` = 100 samples of
  history are kept.

## Installation

```
pip install .
```

The package has no runtime dependencies.

## Examples

```python
from airband.squelch import Squelch

squelch = Squelch()
for _ in range(5000):
    squelch.process_raw_sample(0.05)   # background noise
for _ in range(500):
    squelch.process_raw_sample(0.75)   # a transmission
print(squelch.is_open(), squelch.open_count())
```

```python
from airband.constants import MixMode
from airband.udp_stream import UdpStream

with UdpStream("127.0.0.1", "6001", MixMode.STEREO) as stream:
    stream.write_stereo([0.1, 0.2], [0.3, 0.4])
```

## What the package does not do

It is a library, not a receiver. It has no command to run. It does not
read from radio devices or compute FFTs. The caller fills the channel
buffers. It has no configuration file parsing and no mixers. It has no
Icecast, file, MP3 or PulseAudio outputs and no CTCSS tone detection. UDP
is the only output it provides.

## Running the tests

```
pip install .[test]
pytest
```