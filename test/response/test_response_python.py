# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
import pytest
import numpy as np
import scipy.signal as spsig

import speech_filter.dsp.biquad as bq
import speech_filter.dsp.cascaded_biquads as cbq
import speech_filter.dsp.utils as utils
from speech_filter.dsp.response import (
    RESPONSE_FLOOR,
    biquad_response,
    evaluate_response,
    frequency_grid,
    response_at,
)
from speech_filter.dsp.types import ResponseCurve


@pytest.mark.parametrize("fs", [16000, 44100, 48000])
@pytest.mark.parametrize("n_points", [2, 100, 800])
def test_frequency_grid(fs, n_points):
    freqs = frequency_grid(fs, n_points)

    assert len(freqs) == n_points
    assert freqs[0] == 0
    assert freqs[-1] == fs / 2
    assert np.all(np.diff(freqs) > 0)


def test_frequency_grid_default():
    assert len(frequency_grid(48000)) == 800


def test_frequency_grid_invalid():
    with pytest.raises(utils.InvalidParameterError):
        frequency_grid(0)
    with pytest.raises(utils.InvalidParameterError):
        frequency_grid(48000, -1)


@pytest.mark.parametrize("kind", ["lowpass", "highpass", "notch"])
def test_biquad_response_matches_freqz(kind):
    fs = 48000
    coeffs = bq.design_biquad(kind, fs, 1000, 2)
    freqs = np.linspace(0, fs / 2, 300)

    h = biquad_response(coeffs, 2 * np.pi * freqs / fs)
    _, h_ref = spsig.freqz(coeffs[:3], [1.0, *coeffs[3:]], worN=freqs, fs=fs)

    np.testing.assert_allclose(h, h_ref, atol=1e-12)


def test_empty_cascade():
    fs = 48000
    freqs = frequency_grid(fs)
    curve = evaluate_response([], freqs, fs)

    assert isinstance(curve, ResponseCurve)
    np.testing.assert_allclose(curve.db, 0, atol=1e-9)
    np.testing.assert_array_equal(curve.phase_rad, 0)


def test_empty_grid():
    curve = evaluate_response(cbq.make_butterworth_lowpass(4, 1000, 48000), [], 48000)

    assert curve.db.shape == (0,)
    assert curve.phase_rad.shape == (0,)


def test_grid_shape():
    with pytest.raises(utils.InvalidParameterError):
        evaluate_response([], np.zeros((2, 2)), 48000)


def test_lengths_match():
    fs = 48000
    freqs = frequency_grid(fs, 321)
    curve = evaluate_response(cbq.make_butterworth_highpass(4, 300, fs), freqs, fs)

    assert len(curve.db) == len(freqs)
    assert len(curve.phase_rad) == len(freqs)
    assert len(curve.phase_deg) == len(freqs)
    np.testing.assert_allclose(curve.phase_deg, np.degrees(curve.phase_rad))


def test_magnitude_is_product():
    fs = 48000
    freqs = frequency_grid(fs, 200)
    hp = cbq.make_butterworth_highpass(2, 300, fs)
    lp = cbq.make_butterworth_lowpass(2, 3400, fs)

    both = evaluate_response(hp + lp, freqs, fs)
    sum_db = evaluate_response(hp, freqs, fs).db + evaluate_response(lp, freqs, fs).db

    top = both.db > -100
    np.testing.assert_allclose(both.db[top], sum_db[top], atol=1e-6)


def test_floor():
    fs = 48000
    notch = [bq.make_biquad_notch(fs, 12000, 1)]
    h_db, _ = response_at(notch, 12000, fs)

    # a perfect zero gives the floor rather than -inf
    assert np.isfinite(h_db)
    assert h_db >= utils.db(0, floor=RESPONSE_FLOOR)


@pytest.mark.parametrize("N", [4, 8, 16])
def test_phase_continuous(N):
    fs = 48000
    freqs = frequency_grid(fs, 4801)
    cascade = cbq.make_butterworth_lowpass(N, 1000, fs)
    curve = evaluate_response(cascade, freqs, fs)

    assert curve.phase_rad[0] == pytest.approx(0, abs=1e-12)
    assert np.max(np.abs(np.diff(curve.phase_rad))) < np.pi
    # each section is -90 degrees at the corner frequency
    assert freqs[200] == 1000
    assert curve.phase_deg[200] == pytest.approx(-N * 45, abs=0.01)


def test_unwrap_idempotent():
    fs = 48000
    cascade = cbq.make_butterworth_highpass(8, 300, fs) + cbq.make_butterworth_lowpass(8, 3400, fs)
    curve = evaluate_response(cascade, frequency_grid(fs), fs)

    np.testing.assert_allclose(utils.unwrap_phase(curve.phase_rad), curve.phase_rad)


def test_unwrap():
    wrapped = np.angle(np.exp(1j * np.linspace(0, 6 * np.pi, 100)))
    np.testing.assert_allclose(utils.unwrap_phase(wrapped), np.linspace(0, 6 * np.pi, 100), atol=1e-9)

    assert utils.unwrap_phase(np.array([])).shape == (0,)
    assert utils.unwrap_phase(np.array([1.5])) == pytest.approx([1.5])


def test_speech_band():
    fs = 48000
    cascade = cbq.make_butterworth_highpass(4, 300, fs) + cbq.make_butterworth_lowpass(4, 3400, fs)
    assert len(cascade) == 4

    h_db, _ = response_at(cascade, 1850, fs)
    assert abs(h_db) < 1

    h_db, _ = response_at(cascade, 50, fs)
    assert h_db <= -20

    h_db, _ = response_at(cascade, 300, fs)
    assert h_db == pytest.approx(-3.01, abs=0.2)


@pytest.mark.parametrize("N", [2, 6])
def test_phase_at_zero(N):
    # every highpass section has a double zero at exactly 0 Hz
    fs = 48000
    freqs = frequency_grid(fs)
    curve = evaluate_response(cbq.make_butterworth_highpass(N, 300, fs), freqs, fs)

    assert curve.phase_rad[0] == curve.phase_rad[1]
    # a false step at DC would be close to pi
    assert np.max(np.abs(np.diff(curve.phase_rad[:20]))) < 1.0


def test_phase_at_nyquist_zero():
    fs = 48000
    freqs = frequency_grid(fs)
    curve = evaluate_response(cbq.make_butterworth_lowpass(2, 3400, fs), freqs, fs)

    assert curve.phase_rad[-1] == curve.phase_rad[-2]
