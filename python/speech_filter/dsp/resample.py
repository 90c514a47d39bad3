# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Offline sample rate conversion of mono buffers."""

from math import gcd

import numpy as np
import scipy.signal as spsig

from speech_filter.dsp import utils as utils
from speech_filter.dsp.types import SampleBuffer

RESAMPLE_METHODS = ("linear", "polyphase")


def resampled_length(n_samples: int, fs_in: int, fs_out: int) -> int:
    """Return `ceil(n_samples * fs_out / fs_in)`, computed without
    rounding error.
    """
    return -(-n_samples * fs_out // fs_in)


def resample_linear(signal: np.ndarray, fs_in: int, fs_out: int) -> np.ndarray:
    """
    Resample a signal by linear interpolation.

    Output sample i is taken at input position `t = i * fs_in / fs_out`,
    interpolating between the two nearest input samples. Positions past
    the last input sample use the last sample.

    Parameters
    ----------
    signal : np.ndarray
        1-D input signal.
    fs_in : int
        Sample rate of the input in Hz.
    fs_out : int
        Sample rate of the output in Hz.

    Returns
    -------
    np.ndarray
        The resampled signal, `ceil(len(signal) * fs_out / fs_in)` long.
    """
    n_in = signal.shape[0]
    n_out = resampled_length(n_in, fs_in, fs_out)
    if n_in == 0:
        return np.zeros(0, dtype=signal.dtype)

    t = np.arange(n_out) * (fs_in / fs_out)
    # np.interp holds the end value for t > n_in - 1
    out = np.interp(t, np.arange(n_in), signal)
    return out.astype(signal.dtype)


def resample_polyphase(signal: np.ndarray, fs_in: int, fs_out: int) -> np.ndarray:
    """
    Resample a signal with a polyphase FIR (Kaiser windowed sinc).

    This uses `scipy.signal.resample_poly`, so it band limits the
    signal when downsampling. The output length matches
    :py:func:`resample_linear`.

    Parameters
    ----------
    signal : np.ndarray
        1-D input signal.
    fs_in : int
        Sample rate of the input in Hz.
    fs_out : int
        Sample rate of the output in Hz.

    Returns
    -------
    np.ndarray
        The resampled signal, `ceil(len(signal) * fs_out / fs_in)` long.
    """
    n_out = resampled_length(signal.shape[0], fs_in, fs_out)
    if signal.shape[0] == 0:
        return np.zeros(0, dtype=signal.dtype)

    g = gcd(fs_in, fs_out)
    out = spsig.resample_poly(signal.astype(np.float64), fs_out // g, fs_in // g)
    return out[:n_out].astype(signal.dtype)


def resample(buffer: SampleBuffer, target_fs: int, method: str = "linear") -> SampleBuffer:
    """
    Convert a buffer to a new sample rate.

    If the target rate is the same as the buffer rate, the buffer is
    returned unchanged.

    Parameters
    ----------
    buffer : SampleBuffer
        The audio to convert.
    target_fs : int
        The output sample rate in Hz.
    method : {"linear", "polyphase"}, optional
        Interpolation method, by default "linear".

    Returns
    -------
    SampleBuffer
        A new buffer at target_fs.

    Raises
    ------
    InvalidParameterError
        If target_fs is not a positive integer, or the method is
        unknown.
    """
    target_fs = utils.check_integer_fs(target_fs, "target_fs")
    if method not in RESAMPLE_METHODS:
        raise utils.InvalidParameterError(
            f"method must be one of {RESAMPLE_METHODS}, got {method!r}"
        )

    if target_fs == buffer.fs:
        return buffer

    if method == "linear":
        samples = resample_linear(buffer.samples, buffer.fs, target_fs)
    else:
        samples = resample_polyphase(buffer.samples, buffer.fs, target_fs)

    return SampleBuffer(samples, target_fs)
