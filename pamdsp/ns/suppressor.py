"""Single-band (16 kHz) noise suppressor built on a 160/256 filter bank."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import MutableSequence, Sequence

import numpy as np

from .config import (
    FFT_SIZE,
    FFT_SIZE_BY_2_PLUS_1,
    NS_FRAME_SIZE,
    OVERLAP_SIZE,
    Config,
    SuppressionParams,
    suppression_params_for,
)
from .fast_math import sqrt_approx
from .filterbank import NsFft, apply_filter_bank_window
from .noise_estimator import NoiseEstimator
from .speech_probability import SpeechProbabilityEstimator
from .wiener_filter import WienerFilter

SUPPORTED_SAMPLE_RATE_HZ = 16000

_ONE = np.float32(1.0)
_EPS = np.float32(0.0001)
_DD_WEIGHT = np.float32(0.98)
_DD_COMPLEMENT = np.float32(1.0 - 0.98)
_CLIP_HIGH = np.float32(32767)
_CLIP_LOW = np.float32(-32768)


def _sequential_sum(values: np.ndarray) -> np.float32:
    if values.size == 0:
        return np.float32(0)
    return np.add.accumulate(values, dtype=np.float32)[-1]


def _energy(*arrays: np.ndarray) -> np.float32:
    squares = np.concatenate([a * a for a in arrays]).astype(np.float32)
    return _sequential_sum(squares)


def _form_extended_frame(frame: np.ndarray, memory: np.ndarray) -> np.ndarray:
    """Prepend the stored overlap to ``frame`` and refresh ``memory`` in place."""
    extended = np.concatenate((memory, frame)).astype(np.float32)
    memory[:] = extended[FFT_SIZE - OVERLAP_SIZE:]
    return extended


def _overlap_and_add(extended: np.ndarray, memory: np.ndarray) -> np.ndarray:
    """Return one output frame and refresh the synthesis ``memory`` in place."""
    out = np.empty(NS_FRAME_SIZE, dtype=np.float32)
    out[:OVERLAP_SIZE] = memory + extended[:OVERLAP_SIZE]
    out[OVERLAP_SIZE:] = extended[OVERLAP_SIZE:NS_FRAME_SIZE]
    memory[:] = extended[NS_FRAME_SIZE:]
    return out


def _magnitude_spectrum(real: np.ndarray, imag: np.ndarray) -> np.ndarray:
    power = (real * real + imag * imag).astype(np.float32)
    spectrum = (np.asarray(sqrt_approx(power), dtype=np.float32) + _ONE).astype(np.float32)
    spectrum[0] = np.abs(real[0]) + _ONE
    spectrum[-1] = np.abs(real[-1]) + _ONE
    return spectrum


def _compute_snr(
    filter_gains: np.ndarray,
    prev_signal_spectrum: np.ndarray,
    signal_spectrum: np.ndarray,
    prev_noise_spectrum: np.ndarray,
    noise_spectrum: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    prev_estimate = prev_signal_spectrum / (prev_noise_spectrum + _EPS) * filter_gains
    post_snr = np.where(
        signal_spectrum > noise_spectrum,
        signal_spectrum / (noise_spectrum + _EPS) - _ONE,
        0,
    ).astype(np.float32)
    prior_snr = (_DD_WEIGHT * prev_estimate + _DD_COMPLEMENT * post_snr).astype(np.float32)
    return prior_snr, post_snr


def _zeros_overlap() -> np.ndarray:
    return np.zeros(OVERLAP_SIZE, dtype=np.float32)


@dataclass
class _ChannelState:
    params: SuppressionParams
    speech_probability: SpeechProbabilityEstimator = field(init=False)
    wiener_filter: WienerFilter = field(init=False)
    noise_estimator: NoiseEstimator = field(init=False)
    prev_analysis_signal_spectrum: np.ndarray = field(
        default_factory=lambda: np.ones(FFT_SIZE_BY_2_PLUS_1, dtype=np.float32)
    )
    analyze_analysis_memory: np.ndarray = field(default_factory=_zeros_overlap)
    process_analysis_memory: np.ndarray = field(default_factory=_zeros_overlap)
    process_synthesis_memory: np.ndarray = field(default_factory=_zeros_overlap)

    def __post_init__(self) -> None:
        self.speech_probability = SpeechProbabilityEstimator()
        self.wiener_filter = WienerFilter(self.params)
        self.noise_estimator = NoiseEstimator(self.params)


def _write_back(target: MutableSequence[float], values: np.ndarray) -> None:
    if isinstance(target, np.ndarray):
        target[...] = values
    else:
        target[:] = values.tolist()


class Suppressor:
    """Noise suppressor for one 16 kHz stream; not safe for concurrent use.

    Frames are 10 ms (160 samples) per channel, indexed [channel][sample].
    Set ``capture_output_used`` to False to skip synthesis in :meth:`process`.
    """

    def __init__(self, config: Config, sample_rate_hz: int, num_channels: int) -> None:
        if sample_rate_hz != SUPPORTED_SAMPLE_RATE_HZ:
            raise ValueError(f"ns: only 16 kHz supported, got {sample_rate_hz}")
        if num_channels <= 0:
            raise ValueError("ns: num_channels must be > 0")
        self._params = suppression_params_for(config.target_level)
        self._num_analyzed_frames = -1
        self._fft = NsFft()
        self.capture_output_used = True
        self._channels = [_ChannelState(self._params) for _ in range(num_channels)]

    @property
    def num_channels(self) -> int:
        """The configured channel count."""
        return len(self._channels)

    def _frames(self, audio: Sequence[Sequence[float]], what: str) -> list[np.ndarray]:
        if len(audio) != len(self._channels):
            raise ValueError(
                f"ns.{what}: got {len(audio)} channels, want {len(self._channels)}"
            )
        frames = []
        for c, samples in enumerate(audio):
            if len(samples) != NS_FRAME_SIZE:
                raise ValueError(
                    f"ns.{what}: channel {c} has {len(samples)} samples, want {NS_FRAME_SIZE}"
                )
            frames.append(np.asarray(samples, dtype=np.float32).copy())
        return frames

    def analyze(self, audio: Sequence[Sequence[float]]) -> None:
        """Adapt the noise model to one frame; ``audio`` is not modified."""
        frames = self._frames(audio, "analyze")
        for channel in self._channels:
            channel.noise_estimator.prepare_analysis()

        if not any(
            _energy(channel.analyze_analysis_memory, frame) > 0
            for channel, frame in zip(self._channels, frames)
        ):
            return

        self._num_analyzed_frames = max(self._num_analyzed_frames + 1, 0)
        n = self._num_analyzed_frames

        for channel, frame in zip(self._channels, frames):
            extended = _form_extended_frame(frame, channel.analyze_analysis_memory)
            apply_filter_bank_window(extended)
            real, imag = self._fft.forward(extended)
            signal_spectrum = _magnitude_spectrum(real, imag)

            signal_energy = _sequential_sum((real * real + imag * imag).astype(np.float32))
            signal_energy = np.float32(signal_energy / np.float32(FFT_SIZE_BY_2_PLUS_1))
            signal_spectral_sum = _sequential_sum(signal_spectrum)

            noise = channel.noise_estimator
            noise.pre_update(n, signal_spectrum, signal_spectral_sum)

            prior_snr, post_snr = _compute_snr(
                channel.wiener_filter.filter,
                channel.prev_analysis_signal_spectrum,
                signal_spectrum,
                noise.prev_noise_spectrum,
                noise.noise_spectrum,
            )

            channel.speech_probability.update(
                n,
                prior_snr,
                post_snr,
                noise.conservative_noise_spectrum,
                signal_spectrum,
                signal_spectral_sum,
                signal_energy,
            )
            noise.post_update(channel.speech_probability.speech_probability, signal_spectrum)
            channel.prev_analysis_signal_spectrum = signal_spectrum

    def process(self, audio: Sequence[MutableSequence[float]]) -> Sequence[MutableSequence[float]]:
        """Suppress noise in one frame in place and return ``audio``."""
        frames = self._frames(audio, "process")
        n = self._num_analyzed_frames

        spectra = []
        energies_before = []
        for channel, frame in zip(self._channels, frames):
            extended = _form_extended_frame(frame, channel.process_analysis_memory)
            apply_filter_bank_window(extended)
            energies_before.append(_energy(extended))
            real, imag = self._fft.forward(extended)
            signal_spectrum = _magnitude_spectrum(real, imag)
            noise = channel.noise_estimator
            channel.wiener_filter.update(
                n,
                noise.noise_spectrum,
                noise.prev_noise_spectrum,
                noise.parametric_noise_spectrum,
                signal_spectrum,
            )
            spectra.append((real, imag))

        if not self.capture_output_used:
            return audio

        gains = np.minimum.reduce([ch.wiener_filter.filter for ch in self._channels]).astype(
            np.float32
        )

        synthesized = []
        gain_adjustments = []
        for channel, (real, imag), energy_before in zip(
            self._channels, spectra, energies_before
        ):
            extended = self._fft.inverse(real * gains, imag * gains)
            energy_after = _energy(extended)
            apply_filter_bank_window(extended)
            gain_adjustments.append(
                np.float32(
                    channel.wiener_filter.compute_overall_scaling_factor(
                        n,
                        channel.speech_probability.prior_speech_prob,
                        energy_before,
                        energy_after,
                    )
                )
            )
            synthesized.append(extended)

        gain_adjustment = min(gain_adjustments)
        for channel, extended, target in zip(self._channels, synthesized, audio):
            scaled = (extended * gain_adjustment).astype(np.float32)
            out = _overlap_and_add(scaled, channel.process_synthesis_memory)
            out = np.clip(out, _CLIP_LOW, _CLIP_HIGH).astype(np.float32)
            _write_back(target, out)
        return audio