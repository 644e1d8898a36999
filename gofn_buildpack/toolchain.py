"""Queries against the active Go toolchain."""

from __future__ import annotations

import re

from .context import BuildContext
from .errors import ExternalToolFailure
from .version import Version

_GO_VERSION_PATTERN = re.compile(r"\bgo(\d+(?:\.\d+){0,2})")

# Go releases that build vendored functions without go.mod.
NO_GO_MOD_RELEASES = frozenset({(1, 11), (1, 13)})


def go_version(ctx: BuildContext) -> Version:
    """
    Return the version of the ``go`` binary on the build PATH.

    ``go version`` prints e.g. ``go version go1.13.8 linux/amd64``;
    release candidates such as ``go1.21rc2`` resolve to ``1.21.0``.
    """
    output = ctx.exec(["go", "version"]).stdout
    match = _GO_VERSION_PATTERN.search(output)
    if match is None:
        raise ExternalToolFailure(f"unrecognised `go version` output: {output.strip()}", argv=["go", "version"])
    return Version.parse(match.group(1))


def supports_no_go_mod(ctx: BuildContext) -> bool:
    """Go 1.11 and 1.13 can build a vendored function that has no go.mod."""
    version = go_version(ctx)
    return (version.major, version.minor) in NO_GO_MOD_RELEASES


__all__ = ["NO_GO_MOD_RELEASES", "go_version", "supports_no_go_mod"]
