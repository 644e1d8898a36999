"""
Error model for the functions-framework buildpack.

Every failure surfaced by the build pipeline is a ``BuildpackError``
carrying a machine-readable code, an optional hint and a context dict.
The CLI formats these for the user with :func:`format_error`.
"""

from __future__ import annotations

import traceback
from typing import Any, Dict, Optional, Sequence


# Maximum length for traceback output in verbose mode
_TRACE_LIMIT = 4000


class BuildpackError(Exception):
    """
    Base exception for all buildpack failures.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code
        hint: Optional suggestion for resolving the error
        context: Additional metadata about the error
    """

    def __init__(
        self,
        message: str,
        *,
        code: str,
        hint: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.hint = hint
        self.context = context or {}

    def __str__(self) -> str:
        return self.message

    def format(self, *, verbose: bool = False) -> str:
        """Render the code, message, hint and (when verbose) context."""
        lines = [f"Error [{self.code}]: {self.message}"]
        if self.hint:
            lines.append(f"Hint: {self.hint}")
        if verbose and self.context:
            lines.append("\nContext:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")
        return "\n".join(lines)


class UserConfigurationError(BuildpackError):
    """
    The function source is not deployable as given.

    Raised when:
    - go.mod is missing and the Go toolchain requires one
    - go.mod exists but is not writable
    - the module path has no dot in its first path element

    The message is reported to the user verbatim.
    """

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "USER_CONFIG_ERROR")
        super().__init__(message, **kwargs)


class ExternalToolFailure(BuildpackError):
    """A toolchain command (go, git, the package helper) failed."""

    def __init__(
        self,
        message: str,
        *,
        argv: Sequence[str] = (),
        returncode: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
        **kwargs,
    ):
        kwargs.setdefault("code", "EXTERNAL_TOOL_FAILURE")
        context = kwargs.setdefault("context", {}) or {}
        context.setdefault("command", " ".join(argv))
        context.setdefault("returncode", returncode)
        kwargs["context"] = context
        super().__init__(message, **kwargs)
        self.argv = list(argv)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    def format(self, *, verbose: bool = False) -> str:
        text = super().format(verbose=verbose)
        if verbose and self.stderr:
            text = f"{text}\n\nstderr:\n{self.stderr.rstrip()}"
        return text

    def wrap(self, prefix: str) -> "ExternalToolFailure":
        """Return a copy of this failure with ``prefix`` prepended to the message."""
        return ExternalToolFailure(
            f"{prefix}: {self.message}",
            argv=self.argv,
            returncode=self.returncode,
            stdout=self.stdout,
            stderr=self.stderr,
            hint=self.hint,
            context=dict(self.context),
        )


class VersionParseError(BuildpackError):
    """A framework version string could not be parsed."""

    def __init__(self, literal: str, **kwargs):
        kwargs.setdefault("code", "VERSION_PARSE_ERROR")
        context = kwargs.setdefault("context", {}) or {}
        context.setdefault("literal", literal)
        kwargs["context"] = context
        super().__init__(f"unable to parse framework version string {literal!r}", **kwargs)
        self.literal = literal


class TemplateRenderError(BuildpackError):
    """Rendering or writing the generated main.go failed."""

    def __init__(self, message: str, *, destination: str, **kwargs):
        kwargs.setdefault("code", "TEMPLATE_RENDER_ERROR")
        context = kwargs.setdefault("context", {}) or {}
        context.setdefault("destination", destination)
        kwargs["context"] = context
        super().__init__(f"{destination}: {message}", **kwargs)
        self.destination = destination


def format_error(exc: BaseException, *, verbose: bool = False) -> str:
    """
    Format an exception for terminal display.

    Args:
        exc: Exception to format
        verbose: Include context entries and the current traceback

    Returns:
        Multi-line error message

    Examples:
        >>> print(format_error(UserConfigurationError("go.mod exists but is not writable")))
        Error [USER_CONFIG_ERROR]: go.mod exists but is not writable
    """
    lines = []
    if isinstance(exc, BuildpackError):
        lines.append(exc.format(verbose=verbose))
    else:
        lines.append(f"Error: {exc.__class__.__name__}: {exc}")

    if verbose:
        trace = traceback.format_exc().strip()
        if trace and trace != "NoneType: None":
            if len(trace) > _TRACE_LIMIT:
                trace = f"{trace[:_TRACE_LIMIT - 3]}..."
            lines.append("\nTraceback:")
            lines.append(trace)

    return "\n".join(lines)


__all__ = [
    "BuildpackError",
    "UserConfigurationError",
    "ExternalToolFailure",
    "VersionParseError",
    "TemplateRenderError",
    "format_error",
]
