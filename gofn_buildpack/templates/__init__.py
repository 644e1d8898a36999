"""
Entry-point templates for generated function applications.

Example:
    >>> from gofn_buildpack.templates import select_variant
    >>> select_variant("v1.0.9").name
    'V0'
"""

from .engine import TemplateVariant, V1_1_THRESHOLD, render_main, select_variant

__all__ = ["TemplateVariant", "V1_1_THRESHOLD", "render_main", "select_variant"]
