# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Turn captured audio into WAV files at the export sample rate."""

from typing import Iterable

import numpy as np

from speech_filter.dsp import utils as utils
from speech_filter.dsp.resample import resample
from speech_filter.dsp.types import SampleBuffer
from speech_filter.dsp.wav import encode_wav
from speech_filter.models.session import ExportSettings

RAW_WAV_NAME = "raw.wav"
FILTERED_WAV_NAME = "filtered.wav"


def concat_chunks(chunks: Iterable[np.ndarray], fs: int) -> SampleBuffer:
    """Join captured chunks, in order, into a single buffer."""
    chunks = [np.asarray(chunk, dtype=np.float32).ravel() for chunk in chunks]
    if not chunks:
        return SampleBuffer(np.zeros(0, dtype=np.float32), fs)
    return SampleBuffer(np.concatenate(chunks), fs)


def export_wav(buffer: SampleBuffer, settings: ExportSettings = ExportSettings()) -> bytes:
    """
    Resample a buffer to the export rate and encode it as WAV.

    Parameters
    ----------
    buffer : SampleBuffer
        The captured audio.
    settings : ExportSettings, optional
        Export rate and resampling method, by default the capture rate.

    Returns
    -------
    bytes
        A canonical mono PCM16 WAV file.
    """
    target_fs = settings.target_fs(buffer.fs)
    return encode_wav(resample(buffer, target_fs, settings.resample_method))


def export_recordings(
    raw: SampleBuffer, filtered: SampleBuffer, settings: ExportSettings = ExportSettings()
) -> dict[str, bytes]:
    """
    Export the raw and filtered recordings as a pair of WAV files.

    Parameters
    ----------
    raw : SampleBuffer
        The unfiltered capture.
    filtered : SampleBuffer
        The filtered capture.
    settings : ExportSettings, optional
        Export rate and resampling method.

    Returns
    -------
    dict[str, bytes]
        ``{"raw.wav": ..., "filtered.wav": ...}``.

    Raises
    ------
    InvalidParameterError
        If both recordings are empty.
    """
    if len(raw) == 0 and len(filtered) == 0:
        raise utils.InvalidParameterError("nothing recorded")

    return {
        RAW_WAV_NAME: export_wav(raw, settings),
        FILTERED_WAV_NAME: export_wav(filtered, settings),
    }
