# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""
Helper functions for displaying the response of a filter cascade.
"""

import matplotlib.pyplot as plt
import numpy as np

from speech_filter.dsp.types import ResponseCurve


def plot_frequency_response(f, curve: ResponseCurve, name="", range=100, show_phase=True):
    """
    Plot the magnitude and phase response.

    Parameters
    ----------
    f : numpy.ndarray
        Frequencies (The X axis)
    curve : ResponseCurve
        Magnitude and unwrapped phase at the corresponding frequencies
        in ``f``.
    name : str
        String to include in the plot title, if not set there will be no title.
    range : int | float
        Set the Y axis lower limit in dB, upper limit will be the maximum
        magnitude.
    show_phase : bool
        Add a second axis with the unwrapped phase in degrees.

    Returns
    -------
    matplotlib.figure.Figure
        The figure, for the caller to show or save.
    """
    y_max = np.max(curve.db) + 1 if len(curve.db) else 1
    y_min = y_max - range

    n_axes = 2 if show_phase else 1
    fig, axs = plt.subplots(n_axes, 1, sharex=True, squeeze=False)
    axs = axs[:, 0]
    if name:
        fig.suptitle(f"{name} frequency response".title())
    axs[0].plot(f, curve.db)
    axs[0].set_ylim([y_min, y_max])
    axs[0].set_ylabel("Magnitude (dB)")
    axs[0].grid()

    if show_phase:
        axs[1].plot(f, curve.phase_deg)
        axs[1].set_ylabel("Phase (deg)")
        axs[1].grid()
    axs[-1].set_xlabel("Frequency (Hz)")

    return fig
