"""Build configuration for the functions-framework buildpack."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


FRAMEWORK_MODULE = "github.com/GoogleCloudPlatform/functions-framework-go"
FRAMEWORK_PACKAGE = FRAMEWORK_MODULE + "/funcframework"
# Pinned framework release used when the function does not declare one.
FRAMEWORK_VERSION = "v1.1.0"
# Requested version for go.mod-less vendored builds, where it cannot be known.
UNKNOWN_FRAMEWORK_VERSION = "v0.0.0"

LAYER_NAME = "functions-framework"
APP_NAME = "serverless_function_app"
FN_SOURCE_DIR = "serverless_function_source_code"
RESERVED_PREFIX = ".google"
OUTPUT_BINARY = "main"

FUNCTION_TARGET_ENV = "FUNCTION_TARGET"
FUNCTION_SIGNATURE_TYPE_ENV = "FUNCTION_SIGNATURE_TYPE"
FUNCTION_SOURCE_ENV = "FUNCTION_SOURCE"
BUILDABLE_ENV = "GOOGLE_BUILDABLE"
BUILDPACK_DIR_ENV = "CNB_BUILDPACK_DIR"
LOG_LEVEL_ENV = "GOFN_BUILDPACK_LOG_LEVEL"


def default_buildpack_root() -> Path:
    """Directory holding the buildpack's bundled assets (the converter helper)."""
    return Path(__file__).resolve().parent


@dataclass(frozen=True)
class BuildConfig:
    """Resolved configuration for one detect or build invocation."""

    application_root: Path
    buildpack_root: Path
    layers_dir: Path
    function_target: Optional[str] = None
    function_signature_type: Optional[str] = None
    function_source: Optional[str] = None
    log_level: str = "info"

    @property
    def function_source_dir(self) -> Path:
        return self.application_root / FN_SOURCE_DIR


def load_build_config(
    app_root: Optional[str | Path] = None,
    layers_dir: Optional[str | Path] = None,
    buildpack_root: Optional[str | Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> BuildConfig:
    """
    Resolve a BuildConfig from explicit arguments and the environment.

    The environment is read here, once. Components downstream receive the
    resulting BuildConfig or FunctionInfo and never consult it again.

    Args:
        app_root: Application root (defaults to the current directory)
        layers_dir: Layers directory (defaults to a ``layers`` directory next to the app root)
        buildpack_root: Buildpack root (defaults to ``$CNB_BUILDPACK_DIR`` or the package directory)
        env: Environment mapping (defaults to ``os.environ``)

    Returns:
        Fully resolved configuration
    """
    if env is None:
        env = os.environ

    root = Path(app_root) if app_root is not None else Path.cwd()
    root = root.resolve()

    if layers_dir is not None:
        layers = Path(layers_dir).resolve()
    else:
        layers = root.parent / "layers"

    if buildpack_root is not None:
        bp_root = Path(buildpack_root).resolve()
    elif env.get(BUILDPACK_DIR_ENV):
        bp_root = Path(env[BUILDPACK_DIR_ENV]).resolve()
    else:
        bp_root = default_buildpack_root()

    return BuildConfig(
        application_root=root,
        buildpack_root=bp_root,
        layers_dir=layers,
        function_target=env.get(FUNCTION_TARGET_ENV),
        function_signature_type=env.get(FUNCTION_SIGNATURE_TYPE_ENV),
        function_source=env.get(FUNCTION_SOURCE_ENV),
        log_level=(env.get(LOG_LEVEL_ENV) or "info").lower(),
    )


__all__ = [
    "FRAMEWORK_MODULE",
    "FRAMEWORK_PACKAGE",
    "FRAMEWORK_VERSION",
    "UNKNOWN_FRAMEWORK_VERSION",
    "LAYER_NAME",
    "APP_NAME",
    "FN_SOURCE_DIR",
    "RESERVED_PREFIX",
    "OUTPUT_BINARY",
    "FUNCTION_TARGET_ENV",
    "FUNCTION_SIGNATURE_TYPE_ENV",
    "FUNCTION_SOURCE_ENV",
    "BUILDABLE_ENV",
    "BUILDPACK_DIR_ENV",
    "LOG_LEVEL_ENV",
    "BuildConfig",
    "default_buildpack_root",
    "load_build_config",
]
