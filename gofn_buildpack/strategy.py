"""Choice between go.mod wiring and the legacy GOPATH vendored layout."""

from __future__ import annotations

import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import UserConfigurationError

GO_MOD = "go.mod"


class Strategy(Enum):
    MODULE_BASED = "module_based"
    VENDORED_LEGACY = "vendored_legacy"


@dataclass(frozen=True)
class ManifestState:
    exists: bool
    writable: bool


def inspect_manifest(source: Path) -> ManifestState:
    """Report whether ``source/go.mod`` exists and has its owner write bit set."""
    path = Path(source) / GO_MOD
    if not path.exists():
        return ManifestState(exists=False, writable=False)
    return ManifestState(exists=True, writable=bool(path.stat().st_mode & stat.S_IWUSR))


def resolve_strategy(manifest: ManifestState, supports_no_go_mod: bool) -> Strategy:
    """
    Decide how the function is wired into the application.

    Args:
        manifest: State of the function's go.mod
        supports_no_go_mod: Whether the toolchain builds vendored code without go.mod

    Raises:
        UserConfigurationError: If go.mod is required but missing, or present
            but read-only. A read-only go.mod would otherwise fail later and
            obscurely, with ``go list -m`` reporting that go.sum updates are
            disabled by ``-mod=readonly``.
    """
    if not manifest.exists:
        if not supports_no_go_mod:
            raise UserConfigurationError(
                "function build requires go.mod file",
                hint="Run `go mod init <module path>` in the function directory",
            )
        return Strategy.VENDORED_LEGACY
    if not manifest.writable:
        raise UserConfigurationError("go.mod exists but is not writable")
    return Strategy.MODULE_BASED


__all__ = ["GO_MOD", "ManifestState", "Strategy", "inspect_manifest", "resolve_strategy"]
