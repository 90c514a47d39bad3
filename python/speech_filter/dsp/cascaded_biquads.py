# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Cascades of biquads, and engines to run them on audio."""

from typing import Protocol, Sequence, runtime_checkable

import numpy as np
import scipy.signal as spsig

from speech_filter.dsp import biquad as bq
from speech_filter.dsp import generic as dspg
from speech_filter.dsp.butterworth import QPlanner, butterworth_q_factors
from speech_filter.dsp.types import BiquadCoefficients, Cascade


@runtime_checkable
class CascadeExecutor(Protocol):
    """
    The interface of an engine that runs a cascade on a stream.

    An engine applies the sections of a cascade in order, sample by
    sample, carrying filter state between frames. Any engine with
    these methods can be used, they do not need to share a base class.
    """

    def update_cascade(self, cascade: Sequence[BiquadCoefficients]) -> None:
        """Replace the sections being run, resetting the state."""
        ...

    def process_frame(self, frame: np.ndarray) -> np.ndarray:
        """Filter a 1-D frame of samples, returning a frame of the same length."""
        ...

    def reset_state(self) -> None:
        """Reset the saved state to zero."""
        ...


class cascaded_biquads(dspg.dsp_block):
    """A chain of biquad filters, run one sample at a time.

    This is the reference engine, each section is a
    :py:class:`speech_filter.dsp.biquad.biquad` in direct form 1 using
    floating point maths. An empty cascade passes the signal through
    unchanged.

    Parameters
    ----------
    cascade : Sequence[BiquadCoefficients]
        Coefficients for each biquad in the cascade, in processing
        order.

    Attributes
    ----------
    biquads : list
        List of biquad objects representing each biquad in the cascade.

    """

    def __init__(self, cascade: Sequence[BiquadCoefficients], fs: int):
        super().__init__(fs)
        self.biquads = [bq.biquad(coeffs, fs) for coeffs in cascade]

    def update_cascade(self, cascade: Sequence[BiquadCoefficients]):
        """Replace the biquads with a new cascade. All states are reset.

        Parameters
        ----------
        cascade : Sequence[BiquadCoefficients]
            The new sections, in processing order.
        """
        self.biquads = [bq.biquad(coeffs, self.fs) for coeffs in cascade]

    def process(self, sample: float) -> float:
        """Process the input sample through the cascaded biquads using
        floating point maths.
        """
        y = sample
        for biquad in self.biquads:
            y = biquad.process(y)

        return y

    def reset_state(self):
        """Reset the biquad saved states to zero."""
        for biquad in self.biquads:
            biquad.reset_state()

        return


class sos_cascade(dspg.dsp_block):
    """A chain of biquad filters, run a frame at a time with
    `scipy.signal.sosfilt`.

    This gives the same output as :py:class:`cascaded_biquads` (to
    floating point rounding) and is much faster on long frames.

    Parameters
    ----------
    cascade : Sequence[BiquadCoefficients]
        Coefficients for each biquad in the cascade, in processing
        order.

    Attributes
    ----------
    sos : np.ndarray
        The cascade as an `(n_sections, 6)` second order sections array.
    """

    def __init__(self, cascade: Sequence[BiquadCoefficients], fs: int):
        super().__init__(fs)
        self.update_cascade(cascade)

    def update_cascade(self, cascade: Sequence[BiquadCoefficients]):
        """Replace the sections with a new cascade. All states are reset.

        Parameters
        ----------
        cascade : Sequence[BiquadCoefficients]
            The new sections, in processing order.
        """
        checked = [bq._check_stable(coeffs) for coeffs in cascade]
        self.sos = np.array([coeffs.as_sos() for coeffs in checked], dtype=np.float64).reshape(
            -1, 6
        )
        self.reset_state()

    def process(self, sample: float) -> float:
        """Process a single sample through the cascade."""
        return float(self.process_frame(np.array([sample]))[0])

    def process_frame(self, frame: np.ndarray) -> np.ndarray:
        """Filter a frame of samples, carrying the filter state to the
        next frame.
        """
        frame = np.asarray(frame, dtype=np.float64)
        if self.sos.shape[0] == 0:
            return frame.copy()
        y, self._zi = spsig.sosfilt(self.sos, frame, zi=self._zi)
        return y

    def reset_state(self):
        """Reset the saved states to zero."""
        self._zi = np.zeros((self.sos.shape[0], 2))


def make_butterworth_lowpass(
    N: int, fc: float, fs: int, planner: QPlanner = butterworth_q_factors
) -> Cascade:
    """
    Generate N/2 sets of biquad coefficients for a Butterworth low-pass
    filter.

    Each section is an RBJ lowpass biquad at fc, with the Q factor of
    the matching Butterworth pole pair.

    Parameters
    ----------
    N : int
        Filter order (must be even, 0 gives an empty cascade).
    fc : float
        -3 dB frequency in Hz.
    fs : int
        Sample frequency in Hz.
    planner : QPlanner, optional
        Function returning the per section Q factors for an order,
        by default :py:func:`speech_filter.dsp.butterworth.butterworth_q_factors`.

    Returns
    -------
    Cascade
        A list of N/2 sets of biquad coefficients.

    Raises
    ------
    InvalidParameterError
        If fc is not between 0 and fs/2, or if N is not even.
    """
    return [bq.make_biquad_lowpass(fs, fc, q) for q in planner(N)]


def make_butterworth_highpass(
    N: int, fc: float, fs: int, planner: QPlanner = butterworth_q_factors
) -> Cascade:
    """
    Generate N/2 sets of biquad coefficients for a Butterworth high-pass
    filter.

    Each section is an RBJ highpass biquad at fc, with the Q factor of
    the matching Butterworth pole pair.

    Parameters
    ----------
    N : int
        Filter order (must be even, 0 gives an empty cascade).
    fc : float
        -3 dB frequency in Hz.
    fs : int
        Sample frequency in Hz.
    planner : QPlanner, optional
        Function returning the per section Q factors for an order,
        by default :py:func:`speech_filter.dsp.butterworth.butterworth_q_factors`.

    Returns
    -------
    Cascade
        A list of N/2 sets of biquad coefficients.

    Raises
    ------
    InvalidParameterError
        If fc is not between 0 and fs/2, or if N is not even.
    """
    return [bq.make_biquad_highpass(fs, fc, q) for q in planner(N)]
