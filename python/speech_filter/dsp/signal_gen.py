# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Signal generator DSP utilities."""

import numpy as np
import scipy.signal as spsig


def sin(fs: int, length: float, freq: float, amplitude: float) -> np.ndarray:
    """
    Generate a sinusoidal signal.

    Parameters
    ----------
    fs : int
        The sampling frequency in Hz.
    length : float
        The duration of the signal in seconds.
    freq : float
        The frequency of the sinusoid in Hz.
    amplitude : float
        The amplitude of the sinusoid.

    Returns
    -------
    np.ndarray
        The generated sinusoidal signal.
    """
    t = np.arange(int(fs * length)) / fs
    return amplitude * np.sin(2 * np.pi * freq * t)


def log_chirp(
    fs: int, length: float, amplitude: float, start: float = 20, stop: float = 20000
) -> np.ndarray:
    """
    Generate a logarithmic chirp signal.

    Parameters
    ----------
    fs : int
        The sample rate of the signal.
    length : float
        The duration of the signal in seconds.
    amplitude : float
        The amplitude of the signal.
    start : float, optional
        The starting frequency of the chirp signal in Hz. Default is
        20 Hz.
    stop : float, optional
        The ending frequency of the chirp signal in Hz. Default is
        20000 Hz, saturated to 0.45*fs.

    Returns
    -------
    np.ndarray
        The generated logarithmic chirp signal.
    """
    stop = min(stop, 0.45 * fs)
    t = np.arange(int(fs * length)) / fs
    return amplitude * spsig.chirp(t, start, length, stop, "log", phi=-90)


def white_noise(fs: int, length: float, amplitude: float, seed=None) -> np.ndarray:
    """
    Generate uniformly distributed white noise in [-amplitude, amplitude].

    Parameters
    ----------
    fs : int
        The sampling frequency of the signal.
    length : float
        The duration of the signal in seconds.
    amplitude : float
        The peak amplitude of the signal.
    seed : int, optional
        Seed for the random generator, for repeatable noise.

    Returns
    -------
    np.ndarray
        The generated white noise signal.
    """
    rng = np.random.default_rng(seed)
    return amplitude * (2 * rng.random(round(length * fs)) - 1)


def mains_hum(
    fs: int, length: float, amplitude: float, freq: float = 50, n_harmonics: int = 3
) -> np.ndarray:
    """
    Generate mains hum: a fundamental plus odd harmonics falling at
    6 dB per harmonic.

    Parameters
    ----------
    fs : int
        The sampling frequency in Hz.
    length : float
        The duration of the signal in seconds.
    amplitude : float
        Amplitude of the fundamental.
    freq : float, optional
        Mains frequency in Hz, by default 50.
    n_harmonics : int, optional
        Total number of tones, including the fundamental.

    Returns
    -------
    np.ndarray
        The generated hum.
    """
    signal = np.zeros(int(fs * length))
    for n in range(n_harmonics):
        harmonic = 2 * n + 1
        if harmonic * freq >= fs / 2:
            break
        signal += sin(fs, length, harmonic * freq, amplitude / 2**n)
    return signal
