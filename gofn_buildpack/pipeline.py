"""
Detect and build phases of the functions-framework buildpack.

``build`` turns an application root holding a bare Go function into an
application: the function moves into ``serverless_function_source_code``,
a strategy is chosen from its go.mod and the toolchain, and a ``main.go``
serving the function is generated.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from .config import (
    FN_SOURCE_DIR,
    FUNCTION_SIGNATURE_TYPE_ENV,
    FUNCTION_SOURCE_ENV,
    FUNCTION_TARGET_ENV,
    LAYER_NAME,
    OUTPUT_BINARY,
    RESERVED_PREFIX,
    BuildConfig,
)
from .context import BuildContext, Layer
from .errors import UserConfigurationError
from .gomod import create_main_go_mod
from .models import BuildResult, FunctionInfo
from .package_name import extract_package_name
from .strategy import Strategy, inspect_manifest, resolve_strategy
from .toolchain import supports_no_go_mod
from .vendored import create_main_vendored

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectResult:
    passed: bool
    reason: str


def detect(config: BuildConfig) -> DetectResult:
    """Opt in when a function target is configured."""
    if config.function_target is not None:
        return DetectResult(passed=True, reason=f"{FUNCTION_TARGET_ENV} set")
    return DetectResult(passed=False, reason=f"{FUNCTION_TARGET_ENV} not set")


def relocate_function_source(app_root: Path) -> Path:
    """
    Move the contents of ``app_root`` into its function source directory.

    Any stale function source directory is replaced. Entries whose names
    start with ``.google`` stay where they are.
    """
    fn_source = app_root / FN_SOURCE_DIR
    if fn_source.exists():
        shutil.rmtree(fn_source)
    fn_source.mkdir(parents=True)
    for entry in sorted(app_root.iterdir()):
        if entry.name == FN_SOURCE_DIR or entry.name.startswith(RESERVED_PREFIX):
            continue
        shutil.move(str(entry), str(fn_source / entry.name))
    return fn_source


def set_functions_env_vars(layer: Layer, config: BuildConfig) -> None:
    """Make the function settings launch-time defaults of the layer."""
    layer.launch = True
    layer.default_launch_env(FUNCTION_TARGET_ENV, config.function_target)
    if config.function_signature_type:
        layer.default_launch_env(FUNCTION_SIGNATURE_TYPE_ENV, config.function_signature_type)
    if config.function_source:
        layer.default_launch_env(FUNCTION_SOURCE_ENV, config.function_source)


def choose_strategy(ctx: BuildContext, source: Path) -> Strategy:
    manifest = inspect_manifest(source)
    # The toolchain is only consulted when go.mod is missing.
    supports = not manifest.exists and supports_no_go_mod(ctx)
    return resolve_strategy(manifest, supports)


def build(ctx: BuildContext, config: BuildConfig) -> BuildResult:
    """
    Convert the function at the application root into an application.

    Raises:
        UserConfigurationError: If the function cannot be built as given
        ExternalToolFailure: If a toolchain command fails
        VersionParseError: If the framework version cannot be parsed
        TemplateRenderError: If ``main.go`` cannot be written
    """
    if not config.function_target:
        raise UserConfigurationError(
            f"{FUNCTION_TARGET_ENV} must name the function to serve",
            hint=f"Set {FUNCTION_TARGET_ENV} to the exported Go function, e.g. HelloWorld",
        )

    layer = ctx.layer(LAYER_NAME)
    ctx.setenv("GOPATH", str(layer.path))
    set_functions_env_vars(layer, config)

    fn_source = relocate_function_source(ctx.application_root)
    logger.info(f"Moved function source into {fn_source}")

    fn = FunctionInfo(
        source=fn_source,
        target=config.function_target,
        package=extract_package_name(ctx, fn_source),
    )

    strategy = choose_strategy(ctx, fn.source)
    logger.info(f"Using {strategy.value} strategy for package {fn.package}")
    if strategy is Strategy.MODULE_BASED:
        result = create_main_go_mod(ctx, fn)
    else:
        result = create_main_vendored(ctx, layer, fn)

    ctx.add_web_process([OUTPUT_BINARY])
    return result


__all__ = [
    "DetectResult",
    "build",
    "choose_strategy",
    "detect",
    "relocate_function_source",
    "set_functions_env_vars",
]
