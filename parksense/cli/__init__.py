"""CLI entrypoint for ParkSense parking sign analysis."""

from __future__ import annotations

import argparse
import logging
import sys
from random import Random

from parksense.analysis.mock import MockOracle
from parksense.analysis.service import ParkingSignAnalyzer
from parksense.cli.helpers import _configure_logging, _render, _resolve_settings, format_result
from parksense.cli.options import ExitCode, LogFormat, build_arg_parser
from parksense.config.loader import Config, load_config
from parksense.config.secrets import load_environment_secrets
from parksense.interfaces.camera import CameraConfig
from parksense.interfaces.vision import CaptureError
from parksense.session.machine import ErrorKind, SessionState, SessionStateMachine
from parksense.vision.capture import FileCamera, SignCapture

logger = logging.getLogger(__name__)


def _setup(args: argparse.Namespace) -> Config:
    """Load configuration and configure logging for a command."""
    config = load_config(args.config)
    _configure_logging(
        level=str(args.log_level or config.logging.level),
        log_format=str(args.log_format or config.logging.format or LogFormat.READABLE.value),
    )
    return config


def run_analyze(args: argparse.Namespace) -> int:
    """Run one capture → analyze → results session on an image file."""
    config = _setup(args)
    if not args.mock:
        load_environment_secrets(env_file=args.env_file, strict=args.env_file is not None)

    settings = _resolve_settings(
        config,
        provider=args.provider,
        model=args.model,
        force_mock=bool(args.mock),
    )
    analyzer = ParkingSignAnalyzer(settings)
    machine = SessionStateMachine(analyzer)

    camera_config = CameraConfig(
        facing_mode=config.camera.facing_mode,
        ideal_width=config.camera.ideal_width,
        ideal_height=config.camera.ideal_height,
    )
    machine.start_capture()
    try:
        frame = SignCapture(FileCamera(args.image), camera_config).capture()
    except CaptureError as e:
        logger.error(str(e))
        machine.cancel_capture()
        return ExitCode.CAPTURE_ERROR

    machine.capture_image(frame)
    machine.request_analysis()

    snapshot = machine.snapshot()
    if snapshot.state == SessionState.RESULTS and snapshot.result is not None:
        print(_render(snapshot.result, as_json=bool(args.json)))
        return ExitCode.OK

    if snapshot.last_error_kind == ErrorKind.CONFIGURATION:
        print(f"Configuration required: {snapshot.last_error}", file=sys.stderr)
        return ExitCode.CONFIGURATION_ERROR

    print(f"Analysis failed: {snapshot.last_error}. Try again.", file=sys.stderr)
    return ExitCode.PROVIDER_ERROR


def run_mock(args: argparse.Namespace) -> int:
    """Print a mock result without touching any provider."""
    _setup(args)
    rng = Random(args.seed) if args.seed is not None else None

    oracle = MockOracle(delay_seconds=0.0, rng=rng)
    result = oracle.respond(args.strategy, args.at)

    print(_render(result, as_json=bool(args.json)))
    return ExitCode.OK


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return a process exit code."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.command == "analyze":
        return int(run_analyze(args))
    if args.command == "mock":
        return int(run_mock(args))

    parser.print_help()
    return 1


__all__ = ["format_result", "main", "run_analyze", "run_mock"]
