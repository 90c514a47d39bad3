# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Build the cascade of biquads described by a :py:class:`FilterSpec`."""

import warnings

from speech_filter.dsp import biquad as bq
from speech_filter.dsp import cascaded_biquads as cbq
from speech_filter.dsp import utils as utils
from speech_filter.dsp.butterworth import Q_PLANNERS
from speech_filter.dsp.types import Cascade
from speech_filter.models.filter_spec import FilterSpec

# distance below Nyquist that out of range frequencies are clamped to
NYQUIST_MARGIN_HZ = 1.0


def clamp_to_nyquist(filter_freq: float, fs: int, name: str = "filter_freq") -> float:
    """
    Saturate a frequency to just below fs/2.

    A :py:class:`NyquistClampWarning` is issued if the frequency is
    changed.

    Parameters
    ----------
    filter_freq : float
        The requested frequency in Hz.
    fs : int
        The sample rate in Hz.
    name : str, optional
        Name of the setting, used in the warning message.

    Returns
    -------
    float
        filter_freq, or ``fs/2 - 1`` if filter_freq was at or above fs/2.
    """
    nyquist = fs / 2
    if filter_freq >= nyquist:
        clamped = nyquist - NYQUIST_MARGIN_HZ
        warnings.warn(
            f"{name} ({filter_freq} Hz) must be less than fs/2, saturating to {clamped} Hz",
            utils.NyquistClampWarning,
            stacklevel=3,
        )
        return clamped
    return filter_freq


def build_cascade(spec: FilterSpec, fs: int) -> Cascade:
    """
    Turn the filter settings into a list of biquad sections.

    The cascade is rebuilt from scratch on every call, it is cheap
    enough to do on every settings change.

    Parameters
    ----------
    spec : FilterSpec
        The filter routing and parameters.
    fs : int
        The sample rate in Hz.

    Returns
    -------
    Cascade
        Sections in processing order: highpass sections, then lowpass
        sections, then the notch. Empty when everything is disabled.

    Raises
    ------
    InvalidParameterError
        If fs is not positive, or an order is odd.
    """
    utils.check_fs(fs)
    planner = Q_PLANNERS[spec.planner]
    cascade: Cascade = []

    if spec.enabled:
        if spec.mode == "lowpass":
            if spec.lp_order > 0:
                lp_cut = clamp_to_nyquist(spec.lp_cut, fs, "lp_cut")
                cascade += cbq.make_butterworth_lowpass(spec.lp_order, lp_cut, fs, planner)
        else:
            # a side with order 0 is not built, so its corner is never clamped
            if spec.hp_order > 0:
                lowcut = clamp_to_nyquist(spec.lowcut, fs, "lowcut")
                cascade += cbq.make_butterworth_highpass(spec.hp_order, lowcut, fs, planner)
            if spec.lp_order > 0:
                highcut = clamp_to_nyquist(spec.highcut, fs, "highcut")
                cascade += cbq.make_butterworth_lowpass(spec.lp_order, highcut, fs, planner)

    if spec.notch_enabled:
        notch_freq = clamp_to_nyquist(spec.notch_freq, fs, "notch_freq")
        cascade.append(bq.make_biquad_notch(fs, notch_freq, spec.notch_q))

    return cascade
