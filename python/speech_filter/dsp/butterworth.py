# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Per stage Q factors for Nth order filters built from cascaded biquads."""

from typing import Callable

import numpy as np

from speech_filter.dsp import utils as utils

QPlanner = Callable[[int], list[float]]


def _check_order(N: int) -> int:
    if int(N) != N or N < 0 or N % 2 != 0:
        raise utils.InvalidParameterError(f"filter order must be a non-negative even integer, got {N}")
    return int(N)


def butterworth_q_factors(N: int) -> list[float]:
    """
    Calculate the Q factors of the N/2 biquads in an Nth order
    Butterworth filter.

    The analog Butterworth poles sit at angles
    `theta_k = (2k - 1)*pi/(2N)` from the imaginary axis, giving
    `Q_k = 1 / (2*cos(theta_k))` for k = 1 .. N/2. Cascading
    lowpass (or highpass) biquads with these Q factors at the same
    cutoff frequency gives a maximally flat response that is -3 dB at
    the cutoff.

    Parameters
    ----------
    N : int
        Filter order, must be even. An order of 0 is a bypass.

    Returns
    -------
    list[float]
        N/2 Q factors, lowest Q first.

    Raises
    ------
    InvalidParameterError
        If N is odd or negative.
    """
    N = _check_order(N)
    ks = np.arange(1, N // 2 + 1)
    q_factors = 1 / (2 * np.cos((2 * ks - 1) * np.pi / (2 * N)))
    return q_factors.tolist()


def fixed_q_factors(N: int) -> list[float]:
    """
    Return N/2 Q factors of 1/sqrt(2).

    This is an approximation to a Butterworth response, only exact for
    N = 2. For higher orders the response droops in the passband and
    is -3N/2 dB at the cutoff. It is kept for compatibility with
    designs that cascade identical sections.

    Parameters
    ----------
    N : int
        Filter order, must be even. An order of 0 is a bypass.

    Returns
    -------
    list[float]
        N/2 Q factors.

    Raises
    ------
    InvalidParameterError
        If N is odd or negative.
    """
    N = _check_order(N)
    return [1 / np.sqrt(2)] * (N // 2)


Q_PLANNERS: dict[str, QPlanner] = {
    "butterworth": butterworth_q_factors,
    "fixed_q": fixed_q_factors,
}
