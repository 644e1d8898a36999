"""Semantic versions as far as framework template selection needs them."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .errors import VersionParseError


_TOLERANT_PATTERN = re.compile(
    r"""
    ^[vV]?
    (?P<major>\d+)
    (?:\.(?P<minor>\d+))?
    (?:\.(?P<patch>\d+))?
    (?:-(?P<prerelease>[0-9A-Za-z.-]+))?
    (?:\+(?P<build>[0-9A-Za-z.-]+))?
    $
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class Version:
    """
    An immutable (major, minor, patch) triple with optional pre-release and
    build metadata.

    Only parsing and :meth:`at_least` are offered. Ordering looks at the
    numeric triple alone, so ``1.1.0-rc1`` counts as ``1.1.0``.
    """

    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None
    build: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "Version":
        """
        Parse a version string tolerantly.

        Surrounding whitespace and a leading ``v`` are ignored, missing minor
        and patch components default to zero, and leading zeros are accepted.

        Raises:
            VersionParseError: If ``text`` is not a version
        """
        if not isinstance(text, str):
            raise VersionParseError(repr(text))
        match = _TOLERANT_PATTERN.match(text.strip())
        if match is None:
            raise VersionParseError(text)
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor") or 0),
            patch=int(match.group("patch") or 0),
            prerelease=match.group("prerelease"),
            build=match.group("build"),
        )

    @property
    def core(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def at_least(self, other: "Version") -> bool:
        return self.core >= other.core

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text


__all__ = ["Version"]
