# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Command line interface for designing filters and filtering WAV files."""

import argparse
import sys
from pathlib import Path

import numpy as np
import scipy.io.wavfile

from speech_filter.design.export import export_recordings
from speech_filter.design.session import FilterSession
from speech_filter.dsp.cascaded_biquads import sos_cascade
from speech_filter.dsp.response import response_at
from speech_filter.dsp.types import SampleBuffer
from speech_filter.models.filter_spec import PRESETS
from speech_filter.models.session import ExportSettings, SessionConfig

REPORT_FREQS = [50, 100, 300, 1000, 1850, 3400, 8000]


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        prog="speech-filter", description="Speech band IIR filter design and export."
    )
    parser.add_argument("--config", type=Path, help="JSON session configuration")
    parser.add_argument("--preset", choices=sorted(PRESETS), help="apply a preset")
    parser.add_argument("--fs", type=int, help="override the sample rate")
    parser.add_argument("--notch", action="store_true", help="enable the notch")
    parser.add_argument("--mode", choices=["band", "lowpass"], help="filter routing")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("presets", help="list the presets")

    resp = sub.add_parser("response", help="print the cascade response")
    resp.add_argument("--points", type=int, default=800)
    resp.add_argument("--csv", type=Path, help="write freq, dB, phase (deg) columns")
    resp.add_argument("--plot", type=Path, help="save a plot of the response")

    filt = sub.add_parser("filter", help="filter a WAV file")
    filt.add_argument("input", type=Path)
    filt.add_argument("--out-dir", type=Path, default=Path("."))
    filt.add_argument("--export-rate", choices=["native", "16000"])

    return parser.parse_args(argv)


def make_session(args) -> FilterSession:
    """Create a session from the configuration file and overrides."""
    config = SessionConfig.from_json_file(args.config) if args.config else SessionConfig()
    if args.fs is not None:
        config = SessionConfig.model_validate({**config.model_dump(), "fs": args.fs})
    session = FilterSession(config)
    if args.preset:
        session.apply_preset(args.preset)
    changes = {}
    if args.notch:
        changes["notch_enabled"] = True
    if args.mode:
        changes["mode"] = args.mode
    if changes:
        session.update_spec(**changes)
    return session


def read_wav_mono(path) -> SampleBuffer:
    """Read any WAV scipy can read, mixed down to mono float."""
    fs, data = scipy.io.wavfile.read(path)
    if data.dtype == np.uint8:
        data = (data.astype(np.float64) - 128) / 128
    elif np.issubdtype(data.dtype, np.integer):
        data = data.astype(np.float64) / -float(np.iinfo(data.dtype).min)
    if data.ndim > 1:
        data = np.mean(data, axis=1)
    return SampleBuffer(data, fs)


def cmd_presets(args):
    for name, values in PRESETS.items():
        settings = ", ".join(f"{k}={v}" for k, v in values.items())
        print(f"{name}: {settings}")


def cmd_response(args):
    session = make_session(args)
    print(f"{len(session.cascade)} sections at {session.fs} Hz")
    for f in REPORT_FREQS:
        if f < session.fs / 2:
            h_db, phase = response_at(session.cascade, f, session.fs)
            print(f"{f:>8} Hz {h_db:8.2f} dB {np.degrees(phase):9.1f} deg")

    if args.csv or args.plot:
        freqs, curve = session.response(args.points)
        if args.csv:
            np.savetxt(
                args.csv,
                np.column_stack([freqs, curve.db, curve.phase_deg]),
                delimiter=",",
                header="freq_hz,db,phase_deg",
            )
        if args.plot:
            from speech_filter.design.plot import plot_frequency_response

            fig = plot_frequency_response(freqs, curve, name="speech filter")
            fig.savefig(args.plot)


def cmd_filter(args):
    raw = read_wav_mono(args.input)
    # the session runs at the rate of the file
    args.fs = raw.fs
    session = make_session(args)
    engine = sos_cascade(session.cascade, session.fs)
    filtered = SampleBuffer(engine.process_frame(raw.samples), raw.fs)

    settings = session.config.export
    if args.export_rate:
        rate = "native" if args.export_rate == "native" else int(args.export_rate)
        settings = ExportSettings(export_rate=rate, resample_method=settings.resample_method)

    args.out_dir.mkdir(parents=True, exist_ok=True)
    for name, data in export_recordings(raw, filtered, settings).items():
        (args.out_dir / name).write_bytes(data)
        print(f"wrote {args.out_dir / name}")


COMMANDS = {"presets": cmd_presets, "response": cmd_response, "filter": cmd_filter}


def main(argv=None):
    args = parse_arguments(argv)
    COMMANDS[args.command](args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
