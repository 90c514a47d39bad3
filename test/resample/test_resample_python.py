# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
import pytest
import numpy as np

import speech_filter.dsp.resample as rs
import speech_filter.dsp.signal_gen as gen
import speech_filter.dsp.utils as utils
from speech_filter.dsp.types import SampleBuffer


def dominant_frequency(signal, fs):
    spectrum = np.abs(np.fft.rfft(signal * np.hanning(len(signal))))
    return np.fft.rfftfreq(len(signal), 1 / fs)[np.argmax(spectrum)]


@pytest.mark.parametrize(
    "n, fs_in, fs_out, expected",
    [
        (48000, 48000, 16000, 16000),
        (48001, 48000, 16000, 16001),
        (1, 48000, 16000, 1),
        (0, 48000, 16000, 0),
        (441, 44100, 16000, 160),
        (442, 44100, 16000, 161),
        (16000, 16000, 48000, 48000),
    ],
)
def test_resampled_length(n, fs_in, fs_out, expected):
    assert rs.resampled_length(n, fs_in, fs_out) == expected


@pytest.mark.parametrize("method", rs.RESAMPLE_METHODS)
@pytest.mark.parametrize("n", [0, 1, 100, 4801])
@pytest.mark.parametrize("fs_in, fs_out", [(48000, 16000), (44100, 16000), (16000, 48000)])
def test_output_length(method, n, fs_in, fs_out):
    buffer = SampleBuffer(np.zeros(n), fs_in)
    out = rs.resample(buffer, fs_out, method)

    assert out.fs == fs_out
    assert len(out) == rs.resampled_length(n, fs_in, fs_out)
    assert out.samples.dtype == np.float32


@pytest.mark.parametrize("method", rs.RESAMPLE_METHODS)
def test_same_rate(method):
    buffer = SampleBuffer(gen.sin(48000, 0.01, 440, 0.5), 48000)
    assert rs.resample(buffer, 48000, method) is buffer


def test_linear_ramp():
    # linear interpolation of a ramp is exact
    ramp = np.arange(300, dtype=np.float64)
    out = rs.resample_linear(ramp, 48000, 16000)
    np.testing.assert_allclose(out, np.arange(100) * 3.0)

    out = rs.resample_linear(ramp, 16000, 48000)
    expected = np.minimum(np.arange(900) / 3, 299)
    np.testing.assert_allclose(out, expected, atol=1e-12)


def test_linear_holds_end():
    out = rs.resample_linear(np.array([0.0, 1.0]), 16000, 48000)
    np.testing.assert_allclose(out, [0, 1 / 3, 2 / 3, 1, 1, 1])


def test_linear_single_sample():
    out = rs.resample_linear(np.array([0.25]), 48000, 16000)
    np.testing.assert_array_equal(out, [0.25])


@pytest.mark.parametrize("method", rs.RESAMPLE_METHODS)
def test_sine_round_trip(method):
    fs = 48000
    signal = gen.sin(fs, 0.5, 440, 0.5)
    buffer = SampleBuffer(signal, fs)

    down = rs.resample(buffer, 16000, method)
    assert dominant_frequency(down.samples, 16000) == pytest.approx(440, abs=2)

    up = rs.resample(down, fs, method)
    assert len(up) == len(buffer)
    # ignore the edges, where polyphase filtering sees zero padding
    middle = slice(1000, -1000)
    np.testing.assert_allclose(up.samples[middle], signal[middle], atol=0.01)


def test_polyphase_band_limits():
    # a tone above the new Nyquist is removed rather than aliased
    fs = 48000
    buffer = SampleBuffer(gen.sin(fs, 0.2, 12000, 0.5), fs)

    out = rs.resample(buffer, 16000, "polyphase")
    middle = out.samples[500:-500]
    assert np.max(np.abs(middle)) < 0.01


@pytest.mark.parametrize("target_fs", [0, -16000, 16000.5, np.nan, np.inf])
def test_bad_rate(target_fs):
    buffer = SampleBuffer(np.zeros(10), 48000)
    with pytest.raises(utils.InvalidParameterError):
        rs.resample(buffer, target_fs)


def test_bad_method():
    buffer = SampleBuffer(np.zeros(10), 48000)
    with pytest.raises(utils.InvalidParameterError):
        rs.resample(buffer, 16000, "cubic")
