"""
Version-gated rendering of the generated ``main.go``.

Two Jinja2 templates ship with the buildpack. Framework releases from
v1.1.0 onwards register functions through the context-aware API and get
the ``V1_1`` template; older releases get ``V0``. Both templates are
compiled once at import and never modified afterwards.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateError

from ..config import FRAMEWORK_PACKAGE
from ..errors import TemplateRenderError
from ..models import FunctionInfo
from ..version import Version

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / "go"

# First framework release with the context-aware registration API.
V1_1_THRESHOLD = Version(1, 1, 0)


class TemplateVariant(Enum):
    V0 = "main_v0.go.j2"
    V1_1 = "main_v1_1.go.j2"


def _compile_templates() -> Mapping[TemplateVariant, Template]:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,  # Generating Go source, not HTML
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    return MappingProxyType({variant: env.get_template(variant.value) for variant in TemplateVariant})


_TEMPLATES = _compile_templates()


def select_variant(version: str) -> TemplateVariant:
    """
    Pick the template for a framework version string.

    Raises:
        VersionParseError: If ``version`` cannot be parsed
    """
    if Version.parse(version).at_least(V1_1_THRESHOLD):
        return TemplateVariant.V1_1
    return TemplateVariant.V0


def render_main(destination: str | Path, fn: FunctionInfo, version: str) -> TemplateVariant:
    """
    Render the entry point for ``fn`` into ``destination``.

    The function's source, target and package are substituted verbatim;
    nothing is escaped, so callers must pass values that are valid Go.

    Args:
        destination: Path of the ``main.go`` to write
        fn: Function being adapted, with its import path already resolved
        version: Requested framework version, e.g. ``v1.1.0``

    Returns:
        The template variant that was rendered

    Raises:
        VersionParseError: If ``version`` cannot be parsed
        TemplateRenderError: If rendering or writing fails
    """
    destination = Path(destination)
    variant = select_variant(version)
    logger.info(f"Generating {destination} for framework {version} ({variant.name} template)")
    try:
        text = _TEMPLATES[variant].render(fn=fn, framework_package=FRAMEWORK_PACKAGE)
        destination.write_text(text, encoding="utf-8")
    except (TemplateError, OSError) as e:
        raise TemplateRenderError(f"executing template: {e}", destination=str(destination)) from e
    return variant


__all__ = ["TemplateVariant", "V1_1_THRESHOLD", "render_main", "select_variant"]
