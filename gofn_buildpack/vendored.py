"""
Building vendored functions that ship without a go.mod file.

Only Go 1.11 and 1.13 take this path. Such deployments were produced by
running ``go mod vendor`` and then excluding go.mod from the upload, so
that toolchains without native module vendoring still pick up the
vendored packages. They are not GOPATH deployments as written, but they
are built as one: the application root becomes a GOPATH, the function is
moved under ``src/<package>``, and the generated program lives in
``src/serverless_function_app/main``.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from .config import (
    APP_NAME,
    BUILDABLE_ENV,
    FRAMEWORK_MODULE,
    FRAMEWORK_PACKAGE,
    FRAMEWORK_VERSION,
    UNKNOWN_FRAMEWORK_VERSION,
)
from .context import Attribution, BuildContext, Layer
from .errors import UserConfigurationError
from .models import BuildResult, FunctionInfo
from .strategy import Strategy
from .templates import render_main

logger = logging.getLogger(__name__)


def create_main_vendored(
    ctx: BuildContext,
    layer: Layer,
    fn: FunctionInfo,
) -> BuildResult:
    """
    Generate ``main.go`` inside a GOPATH workspace at the application root.

    The function source is moved, not copied, and is not restored if a
    later step fails.

    Returns:
        The build outcome, pointing at the relocated function

    Raises:
        UserConfigurationError: If src/<package> already exists in the application
        ExternalToolFailure: If fetching or checking out the framework fails
    """
    gopath = ctx.application_root
    gopath_src = gopath / "src"

    layer.build = True
    layer.override_build_env("GOPATH", str(gopath))
    layer.override_build_env(BUILDABLE_ENV, f"{APP_NAME}/main")
    gopath_src.mkdir(parents=True, exist_ok=True)

    app_path = gopath_src / APP_NAME / "main"
    app_path.mkdir(parents=True, exist_ok=True)

    # The whole function tree, vendored packages included, moves into GOPATH.
    fn_path = gopath_src / fn.package
    if fn_path.exists():
        raise UserConfigurationError(
            f"cannot move the function into GOPATH: {fn_path} already exists",
            hint=f"Rename the application directory src/{fn.package} or the function package {fn.package!r}",
        )
    fn_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(fn.source), str(fn_path))
    relocated = FunctionInfo(source=fn_path, target=fn.target, package=fn.package)

    vendor_path = fn_path / "vendor"
    framework_vendored_path = vendor_path / FRAMEWORK_PACKAGE

    if framework_vendored_path.exists():
        ctx.log("Found function with vendored dependencies including functions-framework")
        shutil.copytree(vendor_path, app_path / "vendor", dirs_exist_ok=True)
        # Nothing says which release was vendored.
        version = UNKNOWN_FRAMEWORK_VERSION
    else:
        ctx.log("Found function with vendored dependencies excluding functions-framework")
        ctx.warn(
            f"Your vendored dependencies do not contain the functions framework ({FRAMEWORK_PACKAGE}). "
            "If there are conflicts between the vendored packages and the dependencies of the "
            "framework, you may encounter unexpected issues."
        )
        fetch_framework(ctx, gopath)
        version = FRAMEWORK_VERSION

    main_path = app_path / "main.go"
    variant = render_main(main_path, relocated, version)
    return BuildResult(
        strategy=Strategy.VENDORED_LEGACY,
        function=relocated,
        main_path=main_path,
        framework_version=version,
        variant=variant.name,
    )


def fetch_framework(ctx: BuildContext, gopath: Path) -> None:
    """
    Fetch the framework into ``gopath`` and check out the pinned release.

    GOPATH-mode ``go get`` takes no version, but it clones the whole
    repository, so the tag is checked out with git afterwards.
    """
    with ctx.temp_dir(APP_NAME) as cache:
        ctx.exec(
            ["go", "get", FRAMEWORK_PACKAGE],
            env={"GOPATH": str(gopath), "GOCACHE": str(cache), "GO111MODULE": "off"},
            attribution=Attribution.USER,
        )
    ctx.exec(
        ["git", "checkout", FRAMEWORK_VERSION],
        cwd=gopath / "src" / FRAMEWORK_MODULE,
        attribution=Attribution.USER,
    )


__all__ = ["create_main_vendored", "fetch_framework"]
