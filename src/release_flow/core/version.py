"""Semantic version parsing and bumping.

Only the three numeric components are modelled. Tags are produced and
parsed through a ``tag_format`` template containing ``${version}``
(``v${version}`` by default).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from release_flow.exceptions import ReleaseFlowError

_VERSION_RE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")
_VERSION_PATTERN = r"(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)"


class InvalidVersionError(ReleaseFlowError, ValueError):
    """A string is not a ``MAJOR.MINOR.PATCH`` version."""


class BumpType(str, Enum):
    """Release type derived from commit classification."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"

    def __str__(self) -> str:
        return self.value

    @property
    def precedence(self) -> int:
        """Higher number means a stronger bump."""
        return _PRECEDENCE[self]


_PRECEDENCE = {
    BumpType.NONE: 0,
    BumpType.PATCH: 1,
    BumpType.MINOR: 2,
    BumpType.MAJOR: 3,
}


def max_bump(a: BumpType, b: BumpType) -> BumpType:
    """Return the stronger of two bump types.

    >>> max_bump(BumpType.MINOR, BumpType.PATCH)
    <BumpType.MINOR: 'minor'>
    """
    return a if a.precedence >= b.precedence else b


@dataclass(frozen=True, slots=True, order=True)
class Version:
    """A ``MAJOR.MINOR.PATCH`` version with total ordering."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse ``1.2.3`` (a leading ``v`` is tolerated).

        Raises:
            InvalidVersionError: If the string is not a plain semantic version
        """
        text = value.strip()
        if text.startswith("v"):
            text = text[1:]
        match = _VERSION_RE.match(text)
        if match is None:
            raise InvalidVersionError(f"Invalid version: {value!r}")
        return cls(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for a release type.

        MAJOR resets minor and patch, MINOR resets patch, NONE returns
        the version unchanged.
        """
        if bump_type == BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type == BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if bump_type == BumpType.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        return self


def parse_version(value: str) -> Version:
    """Shorthand for :meth:`Version.parse`."""
    return Version.parse(value)


def format_tag(version: Version, tag_format: str) -> str:
    """Render a tag name, e.g. ``v${version}`` -> ``v1.2.3``."""
    return tag_format.replace("${version}", str(version))


def version_from_tag(tag: str, tag_format: str) -> Version | None:
    """Extract the version from a tag produced by ``tag_format``.

    Returns None when the tag does not follow the format.
    """
    prefix, sep, suffix = tag_format.partition("${version}")
    if not sep:
        return None
    pattern = f"^{re.escape(prefix)}({_VERSION_PATTERN}){re.escape(suffix)}$"
    match = re.match(pattern, tag)
    if match is None:
        return None
    return Version.parse(match.group(1))


def latest_tagged_version(tags: list[str], tag_format: str) -> tuple[str, Version] | None:
    """Pick the highest version among tags matching ``tag_format``."""
    best: tuple[str, Version] | None = None
    for tag in tags:
        version = version_from_tag(tag, tag_format)
        if version is None:
            continue
        if best is None or version > best[1]:
            best = (tag, version)
    return best
