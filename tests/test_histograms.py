import numpy as np

from pamdsp.ns.histograms import HISTOGRAM_SIZE, Histograms, SignalModel


def test_signal_model_defaults():
    model = SignalModel()
    assert model.lrt == 0.5
    assert model.avg_log_lrt.shape == (129,)
    assert np.all(model.avg_log_lrt == np.float32(0.5))


def test_fresh_histograms_are_empty():
    h = Histograms()
    assert h.lrt.shape == (HISTOGRAM_SIZE,)
    assert h.lrt.sum() == 0 and h.spectral_flatness.sum() == 0 and h.spectral_diff.sum() == 0


def test_update_counts_one_sample_per_histogram():
    h = Histograms()
    h.update(SignalModel())
    assert h.lrt.sum() == 1
    assert h.spectral_flatness.sum() == 1
    assert h.spectral_diff.sum() == 1


def test_update_selects_bins():
    h = Histograms()
    h.update(SignalModel(lrt=0.25, spectral_flatness=0.5, spectral_diff=0.5))
    assert h.lrt[2] == 1
    assert h.spectral_flatness[10] == 1
    assert h.spectral_diff[5] == 1


def test_out_of_range_values_are_ignored():
    h = Histograms()
    h.update(SignalModel(lrt=-0.1, spectral_flatness=60.0, spectral_diff=150.0))
    h.update(SignalModel(lrt=200.0, spectral_flatness=-1.0, spectral_diff=-0.5))
    assert h.lrt.sum() == 0
    assert h.spectral_flatness.sum() == 0
    assert h.spectral_diff.sum() == 0


def test_repeated_updates_accumulate():
    h = Histograms()
    for _ in range(7):
        h.update(SignalModel(lrt=3.0))
    assert h.lrt.max() == 7


def test_clear_resets_counts():
    h = Histograms()
    for _ in range(5):
        h.update(SignalModel())
    h.clear()
    assert h.lrt.sum() == 0 and h.spectral_flatness.sum() == 0 and h.spectral_diff.sum() == 0