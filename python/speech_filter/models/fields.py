# Copyright 2025-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Reusable pydantic field definitions for filter parameters."""

from functools import partial
from typing import Annotated

from pydantic import Field

MAX_ORDER = 16

DEFAULT_FILTER_FREQ = partial(Field, gt=0, description="Frequency of the filter in Hz.")
DEFAULT_ORDER = partial(
    Field,
    ge=0,
    le=MAX_ORDER,
    multiple_of=2,
    description="Order of the Butterworth filter (even, 0 to bypass).",
)
DEFAULT_Q = partial(Field, gt=0, le=100, description="Q factor of the filter.")
DEFAULT_FS = partial(Field, default=48000, gt=0, description="Sample rate in Hz.")

FilterOrder = Annotated[int, DEFAULT_ORDER()]
