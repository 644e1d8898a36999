"""
gofn-buildpack CLI entry point.

Usage:
    gofn-buildpack detect [--app-root DIR]
    gofn-buildpack build --layers DIR [--app-root DIR] [--buildpack-root DIR]
"""

import argparse
import logging
from typing import Optional

from gofn_buildpack import __version__
from gofn_buildpack.config import LOG_LEVEL_ENV, BuildConfig

from .commands import cmd_build, cmd_detect, config_from_args


def _configure_logging(args, config: BuildConfig) -> None:
    """Configure the package logger from --log-level or the resolved configuration."""
    log_level = (getattr(args, "log_level", None) or config.log_level).lower()

    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warn": logging.WARNING,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }

    logger = logging.getLogger("gofn_buildpack")
    logger.setLevel(level_map.get(log_level, logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        logger.addHandler(handler)
        logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gofn-buildpack",
        description="Turn a Go function into an application served by the functions framework.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warn", "warning", "error"],
        help=f"Logging level (default: ${LOG_LEVEL_ENV} or info)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show error context and tracebacks")

    subparsers = parser.add_subparsers(dest="command", required=True)

    detect_parser = subparsers.add_parser("detect", help="Check whether a function target is configured")
    detect_parser.add_argument("--app-root", help="Application root (default: current directory)")
    detect_parser.set_defaults(func=cmd_detect)

    build_cmd = subparsers.add_parser("build", help="Generate the function application")
    build_cmd.add_argument("--app-root", help="Application root (default: current directory)")
    build_cmd.add_argument("--layers", required=True, help="Layers directory")
    build_cmd.add_argument("--buildpack-root", help="Buildpack root holding the converter helper")
    build_cmd.set_defaults(func=cmd_build)

    return parser


def main(argv: Optional[list] = None) -> int:
    """
    Parse arguments and dispatch to the selected command.

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    args.build_config = config_from_args(args)
    _configure_logging(args, args.build_config)
    return args.func(args)


__all__ = ["build_parser", "main"]
