"""Value types shared across the build pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .strategy import Strategy


@dataclass(frozen=True)
class FunctionInfo:
    """
    The function being adapted.

    Attributes:
        source: Absolute path of the relocated function source tree
        target: Name of the exported Go function to serve, passed through verbatim
        package: Import path of the function's package, substituted verbatim
    """

    source: Path
    target: str
    package: str


@dataclass(frozen=True)
class BuildResult:
    """What a successful build produced."""

    strategy: "Strategy"
    function: FunctionInfo
    main_path: Path
    framework_version: str
    variant: Optional[str] = None
