import math

import numpy as np
import pytest

from pamdsp.biquad import Biquad, Cascade, Coefficients

HPF_16K = [
    Coefficients(
        b=(0.8773539420715290582, -1.754683920749088077, 0.8773539420715289472),
        a=(-1.881687317862849707, 0.8880584644559580410),
    ),
    Coefficients(
        b=(1.0, -1.999810143464515022, 1.0),
        a=(-1.976035417167170793, 0.9779708644868606582),
    ),
    Coefficients(
        b=(1.0, -1.999669231394235469, 1.0),
        a=(-1.994265767864654482, 0.9954861594635392441),
    ),
]


def test_cascade_dc_rejection():
    c = Cascade(HPF_16K)
    data = np.ones(4096, dtype=np.float32)
    c.process(data)
    avg = float(np.mean(np.abs(data[2000:].astype(np.float64))))
    assert avg <= 0.001


def test_cascade_passes_high_freq():
    rate = 16000.0
    n = 4096
    c = Cascade(HPF_16K)
    ref = np.sin(2 * math.pi * 1000 * np.arange(n) / rate).astype(np.float32)
    data = ref.copy()
    c.process(data)
    s_in = float(np.sum(ref[1000:].astype(np.float64) ** 2))
    s_out = float(np.sum(data[1000:].astype(np.float64) ** 2))
    ratio = s_out / s_in
    assert 0.9 <= ratio <= 1.1


def test_cascade_reset_clears_delay_lines():
    c = Cascade(HPF_16K)
    data = np.sin(np.arange(1024) * 0.1).astype(np.float32)
    c.process(data)
    c.reset()
    for stage in c.stages:
        assert list(stage.x) == [0, 0]
        assert list(stage.y) == [0, 0]


def test_reset_gives_same_output_as_fresh_cascade():
    signal = np.sin(np.arange(256) * 0.3).astype(np.float32)
    used = Cascade(HPF_16K)
    used.process(signal.copy())
    used.reset()
    a = signal.copy()
    used.process(a)
    b = signal.copy()
    Cascade(HPF_16K).process(b)
    np.testing.assert_array_equal(a, b)


def test_cascade_len_counts_stages():
    assert len(Cascade(HPF_16K)) == 3
    assert len(Cascade([])) == 0


def test_process_list_in_place():
    samples = [1.0] * 8
    array_copy = np.ones(8, dtype=np.float32)
    result = Cascade(HPF_16K).process(samples)
    Cascade(HPF_16K).process(array_copy)
    assert result is samples
    np.testing.assert_allclose(samples, array_copy, rtol=0, atol=0)


def test_single_stage_matches_difference_equation_first_sample():
    coeffs = HPF_16K[0]
    stage = Biquad(coeffs)
    data = np.array([1.0, 0.0], dtype=np.float32)
    stage.process(data)
    assert data[0] == np.float32(coeffs.b[0])


def test_state_carries_across_calls():
    signal = np.sin(np.arange(320) * 0.2).astype(np.float32)
    whole = signal.copy()
    Cascade(HPF_16K).process(whole)
    split = signal.copy()
    c = Cascade(HPF_16K)
    first, second = split[:160], split[160:]
    c.process(first)
    c.process(second)
    np.testing.assert_array_equal(np.concatenate([first, second]), whole)


@pytest.mark.parametrize(
    "b, a",
    [
        ((1.0, 2.0), (0.1, 0.2)),
        ((1.0, 2.0, 3.0), (0.1,)),
        ((1.0, 2.0, 3.0, 4.0), (0.1, 0.2)),
    ],
)
def test_coefficients_reject_wrong_lengths(b, a):
    with pytest.raises(ValueError):
        Coefficients(b=b, a=a)


def test_process_rejects_two_dimensional_input():
    with pytest.raises(ValueError):
        Cascade(HPF_16K).process(np.zeros((2, 4), dtype=np.float32))