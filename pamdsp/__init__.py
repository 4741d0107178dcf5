"""Audio DSP building blocks: biquads, FFT, windows, high-pass filter and noise suppression."""

__version__ = "0.1.0"
__all__ = ["biquad", "fft", "window", "hpf", "ns"]