"""
Wiring a go.mod-based function into a generated application module.

The application root becomes a new module, ``serverless_function_app``,
that requires the function's module at a placeholder version and replaces
it with the function's directory on disk. The generated ``main.go`` then
imports the function by its own module path.
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Optional

from .config import APP_NAME, FRAMEWORK_MODULE, FRAMEWORK_VERSION
from .context import Attribution, BuildContext, failure_from_result
from .errors import UserConfigurationError
from .models import BuildResult, FunctionInfo
from .strategy import Strategy
from .templates import render_main

logger = logging.getLogger(__name__)

PLACEHOLDER_VERSION = "v0.0.0"

# Fragments of `go list -m <module>` stderr meaning the module is not
# required by go.mod. Other wordings are reported as tool failures.
UNKNOWN_DEPENDENCY_MARKERS = (
    "not a known dependency",
)


def is_unknown_dependency_error(stderr: str) -> bool:
    """
    Whether a failed ``go list -m`` only says the module isn't required.

    Matching is on the human-readable message, so a toolchain that rewords
    it makes the lookup fail loudly instead of falling back to the pinned
    framework version.
    """
    return any(marker in stderr for marker in UNKNOWN_DEPENDENCY_MARKERS)


def module_path(ctx: BuildContext, source: Path) -> str:
    return ctx.exec(["go", "list", "-m"], cwd=source).stdout.strip()


def validate_module_path(module: str) -> None:
    """
    Reject module paths without a dot in their first element.

    ``go mod edit -replace`` only accepts such paths, e.g. ``example.com/module``.
    """
    first = module.split("/")[0]
    if "." not in first:
        raise UserConfigurationError(
            "the module path in the function's go.mod must contain a dot in the first path "
            f"element before a slash, e.g. example.com/module, found: {module}",
            context={"module": module},
        )


def resolve_import_path(ctx: BuildContext, module: str, package: str) -> str:
    """
    Import path of the function's package within its module.

    A directory named after the package at the application root means the
    package lives in that subdirectory; otherwise it is the module root.
    """
    if ctx.file_exists(ctx.application_root, package):
        return f"{module}/{package}"
    return module


def framework_specified_version(ctx: BuildContext, source: Path) -> Optional[str]:
    """
    Framework version required by the function's go.mod, or None if absent.

    Raises:
        ExternalToolFailure: If ``go list`` fails for any other reason
    """
    result = ctx.exec_with_err(["go", "list", "-m", "-f", "{{.Version}}", FRAMEWORK_MODULE], cwd=source)
    if result.ok:
        version = result.stdout.strip()
        ctx.log(f"Found framework version {version}")
        return version
    if is_unknown_dependency_error(result.stderr):
        ctx.log("No framework version specified, using default")
        return None
    raise failure_from_result(result).wrap("checking for functions framework dependency in go.mod")


def create_main_go_mod(ctx: BuildContext, fn: FunctionInfo) -> BuildResult:
    """
    Generate ``main.go`` at the application root for a go.mod function.

    Returns:
        The build outcome, with the function's import path resolved

    Raises:
        UserConfigurationError: If the module path is unusable
        ExternalToolFailure: If a go command fails
    """
    fn_module = module_path(ctx, fn.source)
    validate_module_path(fn_module)
    fn = dataclasses.replace(fn, package=resolve_import_path(ctx, fn_module, fn.package))
    logger.info(f"Function module {fn_module}, package {fn.package}")

    ctx.exec(["go", "mod", "init", APP_NAME])
    ctx.exec(["go", "mod", "edit", "-require", f"{fn_module}@{PLACEHOLDER_VERSION}"])
    ctx.exec(["go", "mod", "edit", "-replace", f"{fn_module}@{PLACEHOLDER_VERSION}={fn.source}"])

    version = framework_specified_version(ctx, fn.source)
    if version is None:
        ctx.exec(
            ["go", "get", f"{FRAMEWORK_MODULE}@{FRAMEWORK_VERSION}"],
            attribution=Attribution.USER,
        )
        version = FRAMEWORK_VERSION

    main_path = ctx.application_root / "main.go"
    variant = render_main(main_path, fn, version)
    return BuildResult(
        strategy=Strategy.MODULE_BASED,
        function=fn,
        main_path=main_path,
        framework_version=version,
        variant=variant.name,
    )


__all__ = [
    "PLACEHOLDER_VERSION",
    "UNKNOWN_DEPENDENCY_MARKERS",
    "create_main_go_mod",
    "framework_specified_version",
    "is_unknown_dependency_error",
    "module_path",
    "resolve_import_path",
    "validate_module_path",
]
