# pamdsp

Audio processing building blocks for 10 ms frame-based speech pipelines,
computed in single precision with numpy:

- `pamdsp.biquad`: cascaded Direct Form I biquad sections. `Coefficients`
  holds one section (`b` = (b0, b1, b2), `a` = (a1, a2)); `Biquad` is one
  stage with its delay lines; `Cascade` runs stages in series, with
  `process(samples)`, `reset()` and `len()`.
- `pamdsp.fft`: `FFTPlan(n)`, a radix-2 real FFT of a power-of-two length
  with a half-spectrum `forward` and an `inverse` scaled by `1/n`.
- `pamdsp.window`: `hann(n)` and `sqrt_hann(n)` windows as float32 arrays.
- `pamdsp.hpf`: `HighPassFilter`, a three-stage per-channel high-pass
  filter for 16, 32 and 48 kHz streams.
- `pamdsp.ns`: a spectral noise suppressor for 16 kHz audio
  (`pamdsp.ns.suppressor.Suppressor`) with four aggressiveness levels
  (`pamdsp.ns.config.SuppressionLevel`), together with the estimators it is
  built from.

## Installation

```
pip install .
```

## Biquad cascades

```python
from pamdsp.biquad import Cascade, Coefficients

cascade = Cascade([Coefficients(b=(1.0, -2.0, 1.0), a=(-1.9, 0.9))])
samples = [1.0] * 160
cascade.process(samples)   # filtered in place and returned
cascade.reset()            # zero the delay lines
```

Both lists and numpy arrays are filtered in place.

## High-pass filter

```python
from pamdsp.hpf import HighPassFilter

hpf = HighPassFilter(16000, 1)
frame = [[1.0] * 160]          # one channel, 160 samples
hpf.process(frame)             # filtered in place
hpf.reset()                    # clear the filter state
print(hpf.sample_rate, hpf.num_channels)
```

An unsupported sample rate, or a frame with the wrong number of channels,
raises `ValueError`.

## Noise suppression

The suppressor works on 10 ms frames at 16 kHz: 160 samples per channel,
indexed `[channel][sample]`. Each frame is first analysed, which updates the
noise model, and then processed, which replaces the samples with the
suppressed output.

```python
from pamdsp.ns.config import Config, SuppressionLevel
from pamdsp.ns.suppressor import Suppressor

suppressor = Suppressor(Config(SuppressionLevel.LEVEL_18DB), 16000, 1)

for frame in frames:            # each frame: list of 160 floats
    audio = [frame]
    suppressor.analyze(audio)
    suppressor.process(audio)   # audio[0] now holds the output
```

- Samples use the 16-bit range: the output is clipped to [-32768, 32767].
- `default_config()` from `pamdsp.ns.config` selects the 12 dB level.
- Setting `suppressor.capture_output_used = False` makes `process` update
  its filter without writing any output.
- A sample rate other than 16000, a channel count below 1, or frames of the
  wrong shape raise `ValueError`.

## FFT

```python
from pamdsp.fft import FFTPlan

plan = FFTPlan(256)
real, imag = plan.forward(samples)    # 129 bins each
restored = plan.inverse(real, imag)   # 256 samples
```

A length that is not a positive power of two raises `ValueError`.

## What this package does not do

It is a library only: there is no command-line tool. It does not read or
write audio files and does not resample; callers supply frames of float
samples at a supported rate. The noise suppressor handles 16 kHz only.

## Running the tests

```
pip install .[test]
pytest
```