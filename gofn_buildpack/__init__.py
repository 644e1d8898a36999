"""
Go functions-framework buildpack.

Converts a directory holding a bare Go function into an application
that serves it through the functions framework:

* ``strategy``: chooses between go.mod wiring and the legacy GOPATH
  vendored layout from the function's go.mod and the Go toolchain.
* ``gomod``: makes the application root a module that requires the
  function's module and replaces it with the local directory.
* ``vendored``: rebuilds a GOPATH workspace for go.mod-less vendored
  functions and fetches the framework when it is not vendored.
* ``templates``: renders the ``main.go`` entry point, choosing the
  template by framework version.
* ``package_name``: asks a helper built with the active toolchain for
  the function's package name.
* ``pipeline``: the detect and build phases tying these together.
"""

__version__ = "0.1.0"

from .errors import (
    BuildpackError,
    ExternalToolFailure,
    TemplateRenderError,
    UserConfigurationError,
    VersionParseError,
)
from .models import BuildResult, FunctionInfo
from .strategy import Strategy
from .version import Version

__all__ = [
    "__version__",
    "BuildpackError",
    "BuildResult",
    "ExternalToolFailure",
    "FunctionInfo",
    "Strategy",
    "TemplateRenderError",
    "UserConfigurationError",
    "Version",
    "VersionParseError",
]
