"""Extraction of the Go package name declared by the function source."""

from __future__ import annotations

import logging
from pathlib import Path

from .config import APP_NAME
from .context import Attribution, BuildContext

logger = logging.getLogger(__name__)

HELPER_DIR = Path("converter") / "get_package"


def extract_package_name(ctx: BuildContext, source: Path) -> str:
    """
    Return the package name declared by the Go files in ``source``.

    The helper program is compiled and run with the same Go toolchain as the
    function itself, so its parser understands whatever syntax the function
    uses. It runs in GOPATH mode out of the buildpack root with a private
    build cache that is removed afterwards. The output is trimmed and
    otherwise returned as-is.

    Raises:
        ExternalToolFailure: If the helper fails
    """
    helper_dir = ctx.buildpack_root / HELPER_DIR
    with ctx.temp_dir(APP_NAME) as cache_dir:
        result = ctx.exec(
            ["go", "run", "main", "-dir", str(source)],
            cwd=helper_dir,
            env={
                "GOPATH": str(helper_dir),
                "GOCACHE": str(cache_dir),
                "GO111MODULE": "off",
            },
            attribution=Attribution.USER,
        )
    package = result.stdout.strip()
    logger.debug(f"Function package name: {package}")
    return package


__all__ = ["extract_package_name"]
