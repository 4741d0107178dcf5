"""Spectral noise suppression for 16 kHz audio in 10 ms frames."""

__all__ = [
    "config",
    "fast_math",
    "filterbank",
    "histograms",
    "prior_signal_model",
    "quantile_noise_estimator",
    "noise_estimator",
    "signal_model_estimator",
    "speech_probability",
    "wiener_filter",
    "suppressor",
]