# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Utility functions used by DSP blocks."""

import numpy as np

FLT_MIN = np.finfo(float).tiny


class InvalidParameterError(ValueError):
    """An argument is outside the range a design or analysis function accepts."""

    pass


class DecodeError(ValueError):
    """A byte stream is not a canonical mono PCM16 WAV file."""

    pass


class NyquistClampWarning(UserWarning):
    """A warning for when a frequency has been clamped below Nyquist."""

    pass


def db(input, floor=FLT_MIN):
    """Convert an amplitude to decibels (20*log10(abs(x) + floor))."""
    out = 20 * np.log10(np.abs(input) + floor)
    return out


def unwrap_phase(phase: np.ndarray) -> np.ndarray:
    """
    Remove artificial 2π jumps from a phase curve.

    Walking the curve from left to right, whenever the step between
    two consecutive points is greater than π, 2π is subtracted from
    every following point. Whenever it is less than -π, 2π is added.
    Steps of more than 3π are corrected by the nearest multiple of 2π,
    which can happen when several wrapped section phases are summed.

    Parameters
    ----------
    phase : np.ndarray
        Raw phase in radians.

    Returns
    -------
    np.ndarray
        The unwrapped phase in radians, same length as the input.
    """
    phase = np.asarray(phase, dtype=np.float64)
    if phase.size == 0:
        return phase.copy()
    return np.unwrap(phase, discont=np.pi)


def check_fs(fs) -> int:
    """Check a sample rate is a positive number."""
    if not fs > 0:
        raise InvalidParameterError(f"sample rate must be positive, got {fs}")
    return fs


def check_integer_fs(fs, name: str = "fs") -> int:
    """Check a sample rate is a positive whole number of Hz, and return
    it as an int.
    """
    if not (np.isfinite(fs) and fs > 0 and int(fs) == fs):
        raise InvalidParameterError(f"{name} must be a positive integer, got {fs}")
    return int(fs)


def check_q_factor(q_factor: float) -> float:
    """Check a filter Q factor is a positive, finite number."""
    if not (q_factor > 0 and np.isfinite(q_factor)):
        raise InvalidParameterError(f"q_factor must be positive, got {q_factor}")
    return q_factor


def check_filter_freq(filter_freq: float, fs) -> float:
    """Check a filter frequency lies strictly between 0 and fs/2.

    This does not saturate, callers that want to saturate to Nyquist
    should use :py:func:`clamp_to_nyquist` first.
    """
    if not 0 < filter_freq < fs / 2:
        raise InvalidParameterError(
            f"filter_freq must be between 0 and fs/2 ({fs / 2} Hz), got {filter_freq}"
        )
    return filter_freq
