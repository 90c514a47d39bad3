# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Frequency and phase response of cascaded biquads."""

from typing import Iterable

import numpy as np

from speech_filter.dsp import utils as utils
from speech_filter.dsp.types import BiquadCoefficients, ResponseCurve

# floor added to the magnitude before taking the log, so a zero in the
# response gives a large negative number rather than -inf
RESPONSE_FLOOR = 1e-12


def frequency_grid(fs: int, n_points: int = 800) -> np.ndarray:
    """
    Create a linear grid of frequencies from 0 Hz to fs/2 inclusive.

    Parameters
    ----------
    fs : int
        The sample rate in Hz.
    n_points : int, optional
        Number of frequencies in the grid, by default 800.

    Returns
    -------
    np.ndarray
        The frequencies in Hz.
    """
    utils.check_fs(fs)
    if n_points < 0:
        raise utils.InvalidParameterError(f"n_points must not be negative, got {n_points}")
    return np.linspace(0, fs / 2, int(n_points))


def biquad_response(coeffs: BiquadCoefficients, w: np.ndarray) -> np.ndarray:
    """
    Evaluate the complex response of a single biquad.

    The transfer function is evaluated at `z = e^(jw)` by substituting
    `z^-1 = cos(-w) + j*sin(-w)` and `z^-2 = cos(-2w) + j*sin(-2w)` into
    the numerator and denominator.

    Parameters
    ----------
    coeffs : BiquadCoefficients
        Normalised section coefficients.
    w : np.ndarray
        Digital angular frequencies in radians per sample.

    Returns
    -------
    np.ndarray
        The complex response at each frequency.
    """
    w = np.asarray(w, dtype=np.float64)
    z1 = np.cos(-w) + 1j * np.sin(-w)
    z2 = np.cos(-2 * w) + 1j * np.sin(-2 * w)

    num = coeffs.b0 + coeffs.b1 * z1 + coeffs.b2 * z2
    den = 1.0 + coeffs.a1 * z1 + coeffs.a2 * z2

    return num / den


def evaluate_response(
    cascade: Iterable[BiquadCoefficients], freqs: np.ndarray, fs: int
) -> ResponseCurve:
    """
    Calculate the magnitude and unwrapped phase of a cascade of
    biquads.

    The magnitude is the product of the section magnitudes, returned
    as `20*log10(|H| + 1e-12)`. The phase is the sum of the section
    phases, each in (-pi, pi], unwrapped across the grid afterwards.
    At a zero of the response the phase is undefined, it is taken from
    the neighbouring point so the curve has no false step there.

    Parameters
    ----------
    cascade : Iterable[BiquadCoefficients]
        The sections, in processing order. An empty cascade is a
        bypass, with a flat 0 dB, 0 rad response.
    freqs : np.ndarray
        The frequencies to evaluate in Hz.
    fs : int
        The sample rate in Hz.

    Returns
    -------
    ResponseCurve
        Magnitude in dB relative to unity gain and unwrapped phase in
        radians, both the same length as freqs.
    """
    utils.check_fs(fs)
    freqs = np.asarray(freqs, dtype=np.float64)
    if freqs.ndim != 1:
        raise utils.InvalidParameterError("freqs must be a 1-D array")

    w = 2 * np.pi * freqs / fs
    magnitude = np.ones_like(w)
    phase = np.zeros_like(w)

    for coeffs in cascade:
        h = biquad_response(coeffs, w)
        magnitude *= np.abs(h)
        phase += np.arctan2(h.imag, h.real)

    h_db = utils.db(magnitude, floor=RESPONSE_FLOOR)
    return ResponseCurve(db=h_db, phase_rad=utils.unwrap_phase(_fill_undefined(phase, magnitude)))


def _fill_undefined(phase: np.ndarray, magnitude: np.ndarray) -> np.ndarray:
    """Replace the phase at zeros of the response, where atan2(0, 0)
    gives an arbitrary value, with the phase of the next defined point
    (or the last defined point at the end of the grid).
    """
    undefined = magnitude <= RESPONSE_FLOOR
    if not undefined.any() or undefined.all():
        return phase

    defined = np.flatnonzero(~undefined)
    nearest = defined[np.minimum(np.searchsorted(defined, np.arange(len(phase))), len(defined) - 1)]
    return np.where(undefined, phase[nearest], phase)


def response_at(cascade: Iterable[BiquadCoefficients], freq: float, fs: int) -> tuple[float, float]:
    """Return the magnitude in dB and phase in radians of a cascade at a
    single frequency.
    """
    curve = evaluate_response(cascade, np.array([freq], dtype=np.float64), fs)
    return float(curve.db[0]), float(curve.phase_rad[0])
