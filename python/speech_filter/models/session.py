# Copyright 2025-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Pydantic models of the session and export configuration."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from speech_filter.models.fields import DEFAULT_FS
from speech_filter.models.filter_spec import FilterSpec

ExportRate = Literal["native", 16000]


class ExportSettings(BaseModel):
    """How recordings are written out."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    export_rate: ExportRate = Field(
        default="native",
        description='Sample rate of exported files, "native" keeps the capture rate.',
    )
    resample_method: Literal["linear", "polyphase"] = Field(
        default="linear", description="Interpolation used when the export rate differs."
    )

    def target_fs(self, fs: int) -> int:
        """Return the export sample rate for audio captured at fs."""
        return fs if self.export_rate == "native" else int(self.export_rate)


class SessionConfig(BaseModel):
    """The configuration a session is created from.

    Example JSON::

        {
            "fs": 48000,
            "filter": {"mode": "band", "lowcut": 300, "highcut": 3400},
            "export": {"export_rate": 16000}
        }
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    fs: int = DEFAULT_FS()
    filter: FilterSpec = Field(default_factory=FilterSpec)
    export: ExportSettings = Field(default_factory=ExportSettings)

    @classmethod
    def from_json_file(cls, path) -> "SessionConfig":
        """Load and validate a configuration from a JSON file."""
        return cls.model_validate_json(Path(path).read_text())
