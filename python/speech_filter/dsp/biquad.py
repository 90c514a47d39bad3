# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""The biquad DSP block."""

import numpy as np

from speech_filter.dsp import generic as dspg
from speech_filter.dsp import utils as utils
from speech_filter.dsp.types import BiquadCoefficients, FilterKind


class biquad(dspg.dsp_block):
    """
    A second order biquadratic filter instance.

    This implements a direct form 1 biquad filter, using the
    coefficients provided at initialisation:
    `y[n] = b0*x[n] + b1*x[n-1] + b2*x[n-2] - a1*y[n-1] - a2*y[n-2]`

    When the coefficients are updated, the biquad states are reset.

    Parameters
    ----------
    coeffs : BiquadCoefficients
        Normalised biquad coefficients `(b0, b1, b2, a1, a2)`.

    Attributes
    ----------
    coeffs : BiquadCoefficients
        Normalised biquad coefficients `(b0, b1, b2, a1, a2)`.

    Raises
    ------
    InvalidParameterError
        If the poles lie on or outside the unit circle.
    """

    def __init__(self, coeffs: BiquadCoefficients, fs: int):
        super().__init__(fs)
        self.coeffs = _check_stable(coeffs)

        self._x1 = 0.0
        self._x2 = 0.0
        self._y1 = 0.0
        self._y2 = 0.0

    def update_coeffs(self, new_coeffs: BiquadCoefficients):
        """Update the saved coefficients to the input values.

        Parameters
        ----------
        new_coeffs : BiquadCoefficients
            The new coefficients to be updated.
        """
        self.coeffs = _check_stable(new_coeffs)

        # reset states to avoid clicks
        self.reset_state()

    def process(self, sample: float) -> float:
        """
        Filter a single sample using direct form 1 biquad using floating
        point maths.

        """
        b0, b1, b2, a1, a2 = self.coeffs
        y = b0 * sample + b1 * self._x1 + b2 * self._x2 - a1 * self._y1 - a2 * self._y2

        self._x2 = self._x1
        self._x1 = sample
        self._y2 = self._y1
        self._y1 = y

        return y

    def reset_state(self):
        """Reset the biquad saved states to zero."""
        self._x1 = 0.0
        self._x2 = 0.0
        self._y1 = 0.0
        self._y2 = 0.0


def _normalise_biquad(coeffs: list[float]) -> BiquadCoefficients:
    """
    Normalise biquad coefficients by dividing by a0.

    Expected input format: [b0, b1, b2, a0, a1, a2]
    Expected output format: (b0, b1, b2, a1, a2)/a0

    """
    if len(coeffs) != 6:
        raise ValueError("expected list of 6 biquad coefficients")
    b0, b1, b2, a0, a1, a2 = (float(c) for c in coeffs)
    return BiquadCoefficients(b0 / a0, b1 / a0, b2 / a0, a1 / a0, a2 / a0)


def _check_stable(coeffs) -> BiquadCoefficients:
    """Check the poles are inside the unit circle."""
    coeffs = BiquadCoefficients(*coeffs)
    if not coeffs.is_stable():
        raise utils.InvalidParameterError(
            "Poles lie outside the unit circle, the filter is unstable"
        )
    return coeffs


def _rbj_prelude(fs: int, filter_freq: float, q_factor: float) -> tuple[float, float]:
    """Check the design arguments, return `(cos(w0), alpha)`."""
    utils.check_fs(fs)
    utils.check_filter_freq(filter_freq, fs)
    utils.check_q_factor(q_factor)

    w0 = 2.0 * np.pi * filter_freq / fs
    alpha = np.sin(w0) / (2.0 * q_factor)
    return np.cos(w0), alpha


def make_biquad_bypass(fs: int) -> BiquadCoefficients:
    """
    Create a bypass biquad filter. Only the b0 coefficient is set.

    Parameters
    ----------
    fs : int
        The sample rate of the audio signal.

    Returns
    -------
    BiquadCoefficients
        The coefficients of the biquad filter in the order
        (b0, b1, b2, a1, a2). The coefficients are normalised by a0
        such that ``a0 = 1``.
    """
    return BiquadCoefficients(1.0, 0.0, 0.0, 0.0, 0.0)


def make_biquad_lowpass(fs: int, filter_freq: float, q_factor: float) -> BiquadCoefficients:
    """Create coefficients for a lowpass biquad filter.

    Parameters
    ----------
    fs : int
        The sample rate of the audio signal.
    filter_freq : float
        The cutoff frequency of the filter.
    q_factor : float
        The Q factor of the filter.

    Returns
    -------
    BiquadCoefficients
        The coefficients of the biquad filter in the order
        (b0, b1, b2, a1, a2). The coefficients are normalised by a0
        such that ``a0 = 1``.

    Raises
    ------
    InvalidParameterError
        If fs or q_factor are not positive, or the filter frequency is
        not between 0 and fs/2.

    """
    cos_w0, alpha = _rbj_prelude(fs, filter_freq, q_factor)

    b0 = (+1.0 - cos_w0) / 2.0
    b1 = +1.0 - cos_w0
    b2 = (+1.0 - cos_w0) / 2.0
    a0 = +1.0 + alpha
    a1 = -2.0 * cos_w0
    a2 = +1.0 - alpha

    return _normalise_biquad([b0, b1, b2, a0, a1, a2])


def make_biquad_highpass(fs: int, filter_freq: float, q_factor: float) -> BiquadCoefficients:
    """Create coefficients for a highpass biquad filter.

    Parameters
    ----------
    fs : int
        The sample rate of the audio signal.
    filter_freq : float
        The cutoff frequency of the highpass filter.
    q_factor : float
        The Q factor of the highpass filter.

    Returns
    -------
    BiquadCoefficients
        The coefficients of the biquad filter in the order
        (b0, b1, b2, a1, a2). The coefficients are normalised by a0
        such that ``a0 = 1``.

    Raises
    ------
    InvalidParameterError
        If fs or q_factor are not positive, or the filter frequency is
        not between 0 and fs/2.

    """
    cos_w0, alpha = _rbj_prelude(fs, filter_freq, q_factor)

    b0 = (1.0 + cos_w0) / 2.0
    b1 = -(1.0 + cos_w0)
    b2 = (1.0 + cos_w0) / 2.0
    a0 = +1.0 + alpha
    a1 = -2.0 * cos_w0
    a2 = +1.0 - alpha

    return _normalise_biquad([b0, b1, b2, a0, a1, a2])


def make_biquad_notch(fs: int, filter_freq: float, q_factor: float) -> BiquadCoefficients:
    """Create a biquad notch filter.

    Parameters
    ----------
    fs : int
        The sampling frequency.
    filter_freq : float
        The center frequency of the notch filter.
    q_factor : float
        The Q factor of the notch filter.

    Returns
    -------
    BiquadCoefficients
        The coefficients of the biquad filter in the order
        (b0, b1, b2, a1, a2). The coefficients are normalised by a0
        such that ``a0 = 1``.

    Raises
    ------
    InvalidParameterError
        If fs or q_factor are not positive, or the filter frequency is
        not between 0 and fs/2.

    """
    cos_w0, alpha = _rbj_prelude(fs, filter_freq, q_factor)

    b0 = +1.0
    b1 = -2.0 * cos_w0
    b2 = +1.0
    a0 = +1.0 + alpha
    a1 = -2.0 * cos_w0
    a2 = +1.0 - alpha

    return _normalise_biquad([b0, b1, b2, a0, a1, a2])


_DESIGNERS = {
    FilterKind.LOWPASS: make_biquad_lowpass,
    FilterKind.HIGHPASS: make_biquad_highpass,
    FilterKind.NOTCH: make_biquad_notch,
}


def design_biquad(
    kind: FilterKind, fs: int, filter_freq: float, q_factor: float
) -> BiquadCoefficients:
    """
    Design a single second order section of the given kind.

    The frequency is not saturated, values at or above fs/2 are
    rejected.

    Parameters
    ----------
    kind : FilterKind
        The type of section, or its string value ("lowpass",
        "highpass" or "notch").
    fs : int
        The sample rate in Hz.
    filter_freq : float
        Cutoff frequency for low and high pass sections, centre
        frequency for notches.
    q_factor : float
        The Q factor of the section.

    Returns
    -------
    BiquadCoefficients
        Coefficients normalised such that ``a0 = 1``.

    Raises
    ------
    InvalidParameterError
        If the kind is unknown, or any of the parameters are out of
        range.
    """
    try:
        kind = FilterKind(kind)
    except ValueError:
        raise utils.InvalidParameterError(f"unknown filter kind {kind!r}") from None
    return _DESIGNERS[kind](fs, filter_freq, q_factor)

