from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


CURRENT_VERSION = "1.1.0"

# Deprecated fields stay accepted for at least this many minor releases and
# are only removed at the next major boundary.
DEPRECATION_WINDOW_MINORS = 2

_SEMVER_RE = re.compile(
    r"^(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)"
    r"(?:-([0-9A-Za-z.-]+))?(?:\+([0-9A-Za-z.-]+))?$"
)


@dataclass(frozen=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    @classmethod
    def parse(cls, value: str) -> "SemVer":
        m = _SEMVER_RE.match(value.strip()) if isinstance(value, str) else None
        if not m:
            raise ValueError(f"not a semantic version: {value!r}")
        major, minor, patch, prerelease, _build = m.groups()
        return cls(int(major), int(minor), int(patch), prerelease)

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.prerelease}" if self.prerelease else base

    @property
    def path_segment(self) -> str:
        """Version-pinned schema directory, e.g. ``v1``."""

        return f"v{self.major}"


class Compatibility(str, Enum):
    """How a document's declared version relates to the validator's version."""

    EXACT = "exact"
    OLDER_MINOR = "older_minor"
    NEWER_PATCH = "newer_patch"
    NEWER_MINOR = "newer_minor"
    MAJOR_MISMATCH = "major_mismatch"
    MALFORMED = "malformed"

    @property
    def accepted(self) -> bool:
        return self not in (Compatibility.MAJOR_MISMATCH, Compatibility.MALFORMED)


def classify(document_version: str, validator_version: str = CURRENT_VERSION) -> Compatibility:
    """Classify a document's ``meta.schema_version`` against a validator version.

    Policy:
    - a different major version is a hard failure (breaking changes live at a
      new schema path)
    - a newer minor within the same major is read forward-compatibly
    - patch differences are never structural
    """

    try:
        doc = SemVer.parse(document_version)
    except ValueError:
        return Compatibility.MALFORMED
    pinned = SemVer.parse(validator_version)

    if doc.major != pinned.major:
        return Compatibility.MAJOR_MISMATCH
    if doc.minor > pinned.minor:
        return Compatibility.NEWER_MINOR
    if doc.minor < pinned.minor:
        return Compatibility.OLDER_MINOR
    if doc.patch > pinned.patch:
        return Compatibility.NEWER_PATCH
    return Compatibility.EXACT


@dataclass(frozen=True)
class DeprecatedField:
    """A field that is still accepted but scheduled for removal.

    ``pointer`` is a JSON Pointer pattern where ``*`` matches any single
    segment, e.g. ``/rows/*/visuals/*/options/legacy_total``.
    """

    pointer: str
    deprecated_in: str
    replacement: str | None = None

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self.pointer.strip("/").split("/"))

    @property
    def guaranteed_through(self) -> SemVer:
        """Last minor release that must still accept the field."""

        since = SemVer.parse(self.deprecated_in)
        return SemVer(since.major, since.minor + DEPRECATION_WINDOW_MINORS, 0)

    def active_in(self, version: str) -> bool:
        """True if the deprecation has been announced at ``version``."""

        since = SemVer.parse(self.deprecated_in)
        target = SemVer.parse(version)
        return target.major == since.major and target.minor >= since.minor


# No v1 fields are deprecated yet.
DEPRECATED_FIELDS: tuple[DeprecatedField, ...] = ()
