# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""
Speech band IIR filter design and analysis.

Designs cascaded biquad filters for removing out of band noise and mains
hum from speech, evaluates their response, and exports audio as WAV.
"""

from importlib import metadata as _metadata

__version__ = _metadata.version("speech_filter")
