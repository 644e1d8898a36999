"""Tests for the package surface."""

from pathlib import Path

import pytest

import gofn_buildpack

PACKAGE_DIR = Path(gofn_buildpack.__file__).parent


def test_exports():
    for name in gofn_buildpack.__all__:
        assert hasattr(gofn_buildpack, name)


@pytest.mark.parametrize("path", sorted(PACKAGE_DIR.rglob("*.py")), ids=lambda p: str(p.relative_to(PACKAGE_DIR)))
def test_sources_use_ascii_dashes(path):
    text = path.read_text(encoding="utf-8")
    assert "\u2013" not in text
    assert "\u2014" not in text
