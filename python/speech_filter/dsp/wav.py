# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""
Canonical mono 16 bit PCM WAV encoding and decoding.

The layout written is the 44 byte header

=======  ====  ===========================
offset   size  value
=======  ====  ===========================
0        4     "RIFF"
4        4     36 + data size
8        4     "WAVE"
12       4     "fmt "
16       4     16
20       2     1 (PCM)
22       2     1 (mono)
24       4     sample rate
28       4     sample rate * 2
32       2     2 (block align)
34       2     16 (bits per sample)
36       4     "data"
40       4     data size (samples * 2)
=======  ====  ===========================

followed by the little endian int16 samples. Only this layout is
accepted by :py:func:`decode_wav`.
"""

import io
from typing import Iterator

import numpy as np
import scipy.io.wavfile

from speech_filter.dsp import utils as utils
from speech_filter.dsp.types import SampleBuffer

WAV_HEADER = np.dtype(
    [
        ("riff", "S4"),
        ("riff_size", "<u4"),
        ("wave", "S4"),
        ("fmt", "S4"),
        ("fmt_size", "<u4"),
        ("audio_format", "<u2"),
        ("n_chans", "<u2"),
        ("fs", "<u4"),
        ("byte_rate", "<u4"),
        ("block_align", "<u2"),
        ("bits", "<u2"),
        ("data_id", "S4"),
        ("data_size", "<u4"),
    ]
)
WAV_HEADER_SIZE = WAV_HEADER.itemsize  # 44
PCM16_SCALE_NEG = 32768
PCM16_SCALE_POS = 32767


def float_to_pcm16(samples: np.ndarray) -> np.ndarray:
    """
    Convert float samples to int16.

    Samples are clamped to [-1, 1], negative values are scaled by 32768
    and positive values by 32767, then rounded to the nearest integer.
    """
    s = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
    scaled = np.where(s < 0, s * PCM16_SCALE_NEG, s * PCM16_SCALE_POS)
    return np.rint(scaled).astype("<i2")


def pcm16_to_float(pcm: np.ndarray) -> np.ndarray:
    """Convert int16 samples to float32, the inverse of
    :py:func:`float_to_pcm16`.
    """
    pcm = pcm.astype(np.float64)
    out = np.where(pcm < 0, pcm / PCM16_SCALE_NEG, pcm / PCM16_SCALE_POS)
    return out.astype(np.float32)


def _write_pcm16(fs: int, pcm: np.ndarray) -> bytes:
    out = io.BytesIO()
    scipy.io.wavfile.write(out, fs, pcm.astype(np.int16))
    return out.getvalue()


def wav_header(fs: int, n_samples: int) -> bytes:
    """Return the 44 byte header for a mono PCM16 file of n_samples."""
    header = np.frombuffer(_write_pcm16(fs, np.zeros(0, dtype=np.int16)), dtype=WAV_HEADER)
    header = header.copy()
    header["riff_size"] = 36 + 2 * n_samples
    header["data_size"] = 2 * n_samples
    return header.tobytes()


def encode_wav_chunks(buffer: SampleBuffer, chunk_size: int = 1 << 16) -> Iterator[bytes]:
    """
    Encode a buffer as WAV, one piece at a time.

    The header is yielded first, then the PCM data in pieces of at most
    chunk_size samples. Joining the pieces gives the same bytes as
    :py:func:`encode_wav`. A caller exporting a long recording can
    stop iterating at any point to cancel.

    Parameters
    ----------
    buffer : SampleBuffer
        The audio to encode.
    chunk_size : int, optional
        Maximum number of samples per data piece.

    Yields
    ------
    bytes
        The header, then the PCM16 data.
    """
    if chunk_size <= 0:
        raise utils.InvalidParameterError(f"chunk_size must be positive, got {chunk_size}")

    n_samples = len(buffer)
    yield wav_header(buffer.fs, n_samples)
    for start in range(0, n_samples, chunk_size):
        yield float_to_pcm16(buffer.samples[start : start + chunk_size]).tobytes()


def encode_wav(buffer: SampleBuffer) -> bytes:
    """
    Encode a buffer as a canonical mono 16 bit PCM WAV file.

    The samples are converted with :py:func:`float_to_pcm16` and written
    with `scipy.io.wavfile.write`.

    Parameters
    ----------
    buffer : SampleBuffer
        The audio to encode, samples outside [-1, 1] are clamped.

    Returns
    -------
    bytes
        The 44 byte header followed by `2 * len(buffer)` bytes of data.
    """
    return _write_pcm16(buffer.fs, float_to_pcm16(buffer.samples))


def decode_wav(data: bytes) -> SampleBuffer:
    """
    Decode a canonical mono 16 bit PCM WAV file.

    The header is checked against the canonical layout before the
    samples are read with `scipy.io.wavfile.read`.

    Parameters
    ----------
    data : bytes
        The file contents, as produced by :py:func:`encode_wav`.

    Returns
    -------
    SampleBuffer
        The decoded samples and sample rate.

    Raises
    ------
    DecodeError
        If the header is not the canonical mono PCM16 layout, or the
        sizes in the header do not match the length of the data.
    """
    data = bytes(data)
    if len(data) < WAV_HEADER_SIZE:
        raise utils.DecodeError(f"expected at least {WAV_HEADER_SIZE} bytes, got {len(data)}")

    header = np.frombuffer(data, dtype=WAV_HEADER, count=1)[0]
    fs = int(header["fs"])
    data_size = int(header["data_size"])

    if header["riff"] != b"RIFF" or header["wave"] != b"WAVE":
        raise utils.DecodeError("not a RIFF/WAVE file")
    if header["fmt"] != b"fmt " or header["fmt_size"] != 16:
        raise utils.DecodeError("expected a 16 byte fmt chunk directly after the WAVE id")
    if header["audio_format"] != 1 or header["n_chans"] != 1 or header["bits"] != 16:
        raise utils.DecodeError(
            f"only mono 16 bit PCM is supported, got format {header['audio_format']}, "
            f"{header['n_chans']} channels, {header['bits']} bits"
        )
    if fs == 0 or header["byte_rate"] != fs * 2 or header["block_align"] != 2:
        raise utils.DecodeError("inconsistent sample rate, byte rate or block align")
    if header["data_id"] != b"data":
        raise utils.DecodeError("expected the data chunk directly after the fmt chunk")
    if data_size % 2 != 0:
        raise utils.DecodeError(f"data size {data_size} is not a whole number of samples")
    if header["riff_size"] != 36 + data_size:
        raise utils.DecodeError(
            f"RIFF size {header['riff_size']} does not match data size {data_size}"
        )
    if len(data) - WAV_HEADER_SIZE != data_size:
        raise utils.DecodeError(
            f"header declares {data_size} data bytes, found {len(data) - WAV_HEADER_SIZE}"
        )

    if data_size == 0:
        pcm = np.zeros(0, dtype=np.int16)
    else:
        _, pcm = scipy.io.wavfile.read(io.BytesIO(data))
    return SampleBuffer(pcm16_to_float(pcm), fs)
