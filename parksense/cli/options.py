"""CLI option models and parser helpers."""

from __future__ import annotations

import argparse
from datetime import datetime
from enum import IntEnum, StrEnum

from parksense.analysis.mock import MockStrategy


class LogFormat(StrEnum):
    """CLI log formatter mode."""

    READABLE = "readable"
    JSON = "json"


class ExitCode(IntEnum):
    """Process exit codes for the analyze command."""

    OK = 0
    PROVIDER_ERROR = 1
    CONFIGURATION_ERROR = 2
    CAPTURE_ERROR = 3


def build_arg_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(prog="parksense", description="Parking sign analysis")
    parser.add_argument("--config", type=str, default=None, help="Path to YAML config file")
    parser.add_argument(
        "--log-format",
        type=str,
        default=None,
        choices=[fmt.value for fmt in LogFormat],
        help="Terminal log format (defaults to the configured format)",
    )
    parser.add_argument("--log-level", type=str, default=None, help="Log level override")
    subparsers = parser.add_subparsers(dest="command")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a photo of a parking sign")
    analyze_parser.add_argument("image", type=str, help="Path to the sign photo")
    analyze_parser.add_argument(
        "--mock",
        action="store_true",
        help="Ignore any API key and use mock results",
    )
    analyze_parser.add_argument(
        "--provider",
        type=str,
        default=None,
        choices=["openai", "anthropic"],
        help="Provider override",
    )
    analyze_parser.add_argument("--model", type=str, default=None, help="Model override")
    analyze_parser.add_argument("--env-file", type=str, default=None, help="Dotenv file with API keys")
    analyze_parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    mock_parser = subparsers.add_parser("mock", help="Print a mock analysis result")
    mock_parser.add_argument(
        "--strategy",
        type=str,
        default=MockStrategy.TIME.value,
        choices=[strategy.value for strategy in MockStrategy],
        help="Mock strategy",
    )
    mock_parser.add_argument(
        "--at",
        type=datetime.fromisoformat,
        default=None,
        help="ISO-8601 moment to treat as now (time strategy)",
    )
    mock_parser.add_argument("--seed", type=int, default=None, help="Random seed (catalog strategy)")
    mock_parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    return parser
