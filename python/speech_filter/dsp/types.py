# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Value types shared by the filter design, analysis and export code."""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

import numpy as np

from speech_filter.dsp.utils import InvalidParameterError, check_integer_fs


class FilterKind(Enum):
    """The second order section types the designer can produce."""

    LOWPASS = "lowpass"
    HIGHPASS = "highpass"
    NOTCH = "notch"


class BiquadCoefficients(NamedTuple):
    """
    Normalised second order section coefficients.

    Represents the transfer function
    `H(z) = (b0 + b1*z^-1 + b2*z^-2) / (1 + a1*z^-1 + a2*z^-2)`,
    i.e. a0 has already been divided out. Note the sign of a1 and a2 is
    that of the denominator, not of the difference equation.
    """

    b0: float
    b1: float
    b2: float
    a1: float
    a2: float

    def as_sos(self) -> list[float]:
        """Return the coefficients as a `scipy.signal` sos row
        `[b0, b1, b2, 1, a1, a2]`.
        """
        return [self.b0, self.b1, self.b2, 1.0, self.a1, self.a2]

    def poles(self) -> np.ndarray:
        """Return the two poles of the section in the z plane."""
        return np.roots([1.0, self.a1, self.a2])

    def is_stable(self) -> bool:
        """Return True if both poles lie inside the unit circle."""
        return bool(np.all(np.abs(self.poles()) < 1))


Cascade = list[BiquadCoefficients]


class ResponseCurve(NamedTuple):
    """Magnitude and unwrapped phase of a cascade over a frequency grid."""

    db: np.ndarray
    phase_rad: np.ndarray

    @property
    def phase_deg(self) -> np.ndarray:
        """The unwrapped phase in degrees."""
        return np.degrees(self.phase_rad)


@dataclass(frozen=True)
class SampleBuffer:
    """
    A mono block of audio.

    Parameters
    ----------
    samples : np.ndarray
        1-D array of samples, nominally in [-1, 1]. Stored as float32.
    fs : int
        Sample rate in Hz.
    """

    samples: np.ndarray = field(repr=False)
    fs: int

    def __post_init__(self):
        # take a private copy, buffers are never shared with the caller
        samples = np.array(self.samples, dtype=np.float32)
        if samples.ndim != 1:
            raise InvalidParameterError("samples must be a 1-D array")
        fs = check_integer_fs(self.fs)
        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "fs", fs)

    def __len__(self):
        return self.samples.shape[0]

    @property
    def duration(self) -> float:
        """Length of the buffer in seconds."""
        return len(self) / self.fs
