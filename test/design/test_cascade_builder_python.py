# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
import warnings

import pytest
import numpy as np

import speech_filter.dsp.biquad as bq
import speech_filter.dsp.cascaded_biquads as cbq
import speech_filter.dsp.utils as utils
from speech_filter.design.cascade import build_cascade, clamp_to_nyquist
from speech_filter.dsp.butterworth import fixed_q_factors
from speech_filter.dsp.response import response_at
from speech_filter.models.filter_spec import FilterSpec


def test_default_band():
    fs = 48000
    cascade = build_cascade(FilterSpec(), fs)

    assert len(cascade) == 4
    assert cascade == cbq.make_butterworth_highpass(4, 300, fs) + cbq.make_butterworth_lowpass(
        4, 3400, fs
    )

    h_db, _ = response_at(cascade, 1850, fs)
    assert abs(h_db) < 1
    h_db, _ = response_at(cascade, 50, fs)
    assert h_db <= -20


@pytest.mark.parametrize("hp_order, lp_order", [(0, 0), (2, 0), (0, 8), (2, 6), (16, 16)])
def test_section_count(hp_order, lp_order):
    spec = FilterSpec(hp_order=hp_order, lp_order=lp_order, notch_enabled=True)
    cascade = build_cascade(spec, 48000)

    assert len(cascade) == hp_order // 2 + lp_order // 2 + 1
    assert cascade[-1] == bq.make_biquad_notch(48000, 50, 30)


def test_lowpass_mode():
    fs = 48000
    spec = FilterSpec(mode="lowpass", lp_cut=4000, lp_order=6)
    cascade = build_cascade(spec, fs)

    assert cascade == cbq.make_butterworth_lowpass(6, 4000, fs)
    h_db, _ = response_at(cascade, 4000, fs)
    assert h_db == pytest.approx(-3.01, abs=0.05)


def test_disabled():
    assert build_cascade(FilterSpec(enabled=False), 48000) == []


def test_notch_only():
    # the notch is independent of the enable flag
    fs = 48000
    spec = FilterSpec(enabled=False, notch_enabled=True, notch_freq=60, notch_q=20)
    cascade = build_cascade(spec, fs)

    assert cascade == [bq.make_biquad_notch(fs, 60, 20)]
    h_db, _ = response_at(cascade, 60, fs)
    assert h_db < -100


def test_fixed_q_planner():
    fs = 48000
    cascade = build_cascade(FilterSpec(planner="fixed_q"), fs)

    assert cascade == cbq.make_butterworth_highpass(
        4, 300, fs, fixed_q_factors
    ) + cbq.make_butterworth_lowpass(4, 3400, fs, fixed_q_factors)


@pytest.mark.parametrize("fs", [8000, 16000, 44100, 48000])
def test_all_sections_stable(fs):
    spec = FilterSpec(hp_order=16, lp_order=16, notch_enabled=True)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", utils.NyquistClampWarning)
        cascade = build_cascade(spec, fs)

    assert all(coeffs.is_stable() for coeffs in cascade)
    assert all(np.all(np.isfinite(coeffs)) for coeffs in cascade)


def test_clamp_highcut():
    # 8 kHz is Nyquist at 16 kHz, it is saturated to 7999 Hz
    fs = 16000
    spec = FilterSpec(highcut=8000)
    with pytest.warns(utils.NyquistClampWarning, match="highcut"):
        cascade = build_cascade(spec, fs)

    assert cascade[2:] == cbq.make_butterworth_lowpass(4, 7999, fs)


@pytest.mark.parametrize("name", ["lowcut", "highcut", "lp_cut", "notch_freq"])
def test_clamp_each(name):
    spec = FilterSpec(mode="lowpass" if name == "lp_cut" else "band", notch_enabled=True)
    spec = spec.model_copy(update={name: 30000})
    with pytest.warns(utils.NyquistClampWarning, match=name):
        build_cascade(spec, 48000)


def test_clamp_value():
    with pytest.warns(utils.NyquistClampWarning):
        assert clamp_to_nyquist(24000, 48000) == 23999
    with pytest.warns(utils.NyquistClampWarning):
        assert clamp_to_nyquist(1e6, 48000) == 23999


def test_no_clamp():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert clamp_to_nyquist(23999.5, 48000) == 23999.5
        build_cascade(FilterSpec(), 48000)


@pytest.mark.parametrize("fs", [0, -48000])
def test_bad_fs(fs):
    with pytest.raises(utils.InvalidParameterError):
        build_cascade(FilterSpec(), fs)


def test_odd_order():
    # model_construct skips validation, the builder still rejects odd orders
    spec = FilterSpec.model_construct(hp_order=3)
    with pytest.raises(utils.InvalidParameterError):
        build_cascade(spec, 48000)


@pytest.mark.parametrize(
    "update, side",
    [
        ({"hp_order": 0, "lowcut": 30000}, {"hp_order": 0}),
        ({"lp_order": 0, "highcut": 30000}, {"lp_order": 0}),
        ({"mode": "lowpass", "lp_order": 0, "lp_cut": 30000}, {"mode": "lowpass", "lp_order": 0}),
    ],
)
def test_no_clamp_unused_corner(update, side):
    # a side with order 0 has no sections, its corner is ignored
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        cascade = build_cascade(FilterSpec(**update), 48000)

    assert cascade == build_cascade(FilterSpec(**side), 48000)
