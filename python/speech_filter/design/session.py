# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""The caller owned state of a filtering session."""

from typing import Literal

import numpy as np

from speech_filter.design.cascade import build_cascade
from speech_filter.design.export import concat_chunks, export_recordings
from speech_filter.dsp import utils as utils
from speech_filter.dsp.response import evaluate_response, frequency_grid
from speech_filter.dsp.types import Cascade, ResponseCurve
from speech_filter.models.filter_spec import FilterSpec, apply_preset
from speech_filter.models.session import SessionConfig

CaptureLabel = Literal["raw", "filtered"]


class FilterSession:
    """
    Holds the filter settings and recordings of one capture session.

    The host owns the session and passes captured chunks in; the
    session never talks to audio hardware. Every change of filter
    settings rebuilds the cascade, which the host hands to its
    :py:class:`speech_filter.dsp.cascaded_biquads.CascadeExecutor`.

    Parameters
    ----------
    config : SessionConfig, optional
        Sample rate, filter and export settings.

    Attributes
    ----------
    config : SessionConfig
        The current configuration.
    cascade : Cascade
        The sections for the current filter settings.
    recording : bool
        True while captured chunks are being kept.
    """

    def __init__(self, config: SessionConfig | None = None):
        self.config = config if config is not None else SessionConfig()
        self.cascade: Cascade = build_cascade(self.config.filter, self.config.fs)
        self.recording = False
        self._chunks: dict[str, list[np.ndarray]] = {"raw": [], "filtered": []}

    @property
    def fs(self) -> int:
        """Capture sample rate in Hz."""
        return self.config.fs

    @property
    def spec(self) -> FilterSpec:
        """The current filter settings."""
        return self.config.filter

    def update_spec(self, spec: FilterSpec | None = None, **changes) -> Cascade:
        """
        Change the filter settings and rebuild the cascade.

        Parameters
        ----------
        spec : FilterSpec, optional
            New settings. If not given, the current settings are used.
        **changes
            Individual settings to change, e.g. ``lowcut=200``.

        Returns
        -------
        Cascade
            The new cascade.
        """
        spec = spec if spec is not None else self.spec
        if changes:
            spec = FilterSpec.model_validate({**spec.model_dump(), **changes})
        cascade = build_cascade(spec, self.fs)
        # only commit once the new settings have been built successfully
        self.config = self.config.model_copy(update={"filter": spec})
        self.cascade = cascade
        return cascade

    def apply_preset(self, name: str) -> Cascade:
        """Apply a named preset, see :py:data:`speech_filter.models.filter_spec.PRESETS`."""
        return self.update_spec(apply_preset(self.spec, name))

    def response(self, n_points: int = 800) -> tuple[np.ndarray, ResponseCurve]:
        """Return the frequency grid and response of the current cascade."""
        freqs = frequency_grid(self.fs, n_points)
        return freqs, evaluate_response(self.cascade, freqs, self.fs)

    def start_recording(self):
        """Discard any previous recording and start keeping captured chunks."""
        self._chunks = {"raw": [], "filtered": []}
        self.recording = True

    def stop_recording(self):
        """Stop keeping captured chunks."""
        self.recording = False

    def capture(self, label: CaptureLabel, samples: np.ndarray):
        """
        Hand a captured chunk to the session.

        Chunks are ignored unless the session is recording.

        Parameters
        ----------
        label : {"raw", "filtered"}
            Which tap the chunk came from.
        samples : np.ndarray
            The chunk, copied by the session.
        """
        if label not in self._chunks:
            raise utils.InvalidParameterError(f"label must be 'raw' or 'filtered', got {label!r}")
        if self.recording:
            self._chunks[label].append(np.array(samples, dtype=np.float32))

    def export(self) -> dict[str, bytes]:
        """
        Export the recordings as WAV files at the configured rate.

        Returns
        -------
        dict[str, bytes]
            ``{"raw.wav": ..., "filtered.wav": ...}``.

        Raises
        ------
        InvalidParameterError
            If nothing has been recorded.
        """
        raw = concat_chunks(self._chunks["raw"], self.fs)
        filtered = concat_chunks(self._chunks["filtered"], self.fs)
        return export_recordings(raw, filtered, self.config.export)
