"""
Command handlers for the buildpack CLI.

Each handler takes the parsed arguments and returns the process exit code.
"""

import argparse
import logging
import sys

from ..config import BuildConfig, load_build_config
from ..context import BuildContext
from ..errors import BuildpackError, format_error
from ..pipeline import build, detect

logger = logging.getLogger(__name__)

# Cloud Native Buildpacks detect contract
DETECT_PASS = 0
DETECT_FAIL = 100


def config_from_args(args: argparse.Namespace) -> BuildConfig:
    """Resolve the configuration once per invocation; handlers reuse ``args.build_config``."""
    config = getattr(args, "build_config", None)
    if config is not None:
        return config
    return load_build_config(
        app_root=getattr(args, "app_root", None),
        layers_dir=getattr(args, "layers", None),
        buildpack_root=getattr(args, "buildpack_root", None),
    )


def cmd_detect(args: argparse.Namespace) -> int:
    """
    Handle the 'detect' subcommand.

    Exits 0 to opt in when FUNCTION_TARGET is set and 100 to opt out.
    """
    config = config_from_args(args)
    result = detect(config)
    if result.passed:
        print(f"Opting in: {result.reason}")
        return DETECT_PASS
    print(f"Opting out: {result.reason}")
    return DETECT_FAIL


def cmd_build(args: argparse.Namespace) -> int:
    """
    Handle the 'build' subcommand.

    Runs the pipeline against the application root, then writes layer
    metadata and ``launch.toml`` into the layers directory.
    """
    config = config_from_args(args)
    ctx = BuildContext(config.application_root, config.buildpack_root, config.layers_dir)
    try:
        result = build(ctx, config)
    except BuildpackError as exc:
        print(format_error(exc, verbose=getattr(args, "verbose", False)), file=sys.stderr)
        return 1
    ctx.write_metadata()
    print(
        f"Generated {result.main_path} "
        f"(strategy: {result.strategy.value}, framework: {result.framework_version})"
    )
    return 0
