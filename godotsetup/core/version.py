"""
Semantic version parsing for Godot release names.

Godot versions are requested as full semantic versions (``4.2.1``,
``4.0.0-beta.16``) and later rendered into upstream file and folder names
by :mod:`godotsetup.toolchain.naming`.

Usage:
    from godotsetup.core.version import parse_version

    version = parse_version("4.0.0-beta.16")
    print(version.major, version.minor, version.patch, version.label)
"""

import re
from dataclasses import dataclass
from typing import Union

from packaging.version import InvalidVersion, Version

from godotsetup.core.exceptions import InvalidVersionError

# Official semantic version regex, see https://semver.org
SEMANTIC_VERSION_REGEX = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$",
    re.ASCII,
)


@dataclass(frozen=True)
class SemanticVersion:
    """
    Parsed semantic version.

    Attributes:
        major: Major version digits
        minor: Minor version digits
        patch: Patch version digits
        label: Pre-release label (e.g. 'beta.16'), empty for final releases
    """

    major: str
    minor: str
    patch: str
    label: str = ""

    @property
    def is_prerelease(self) -> bool:
        """True if the version carries a pre-release label."""
        return self.label != ""

    @property
    def channel(self) -> str:
        """
        Release channel as used in upstream names.

        Returns:
            The label with dots removed, or 'stable' for final releases

        Example:
            >>> SemanticVersion("4", "0", "0", "beta.16").channel
            'beta16'
        """
        if self.label:
            return self.label.replace(".", "")
        return "stable"

    @property
    def significant_patch(self) -> str:
        """Patch number, or empty string when it is absent or zero."""
        if self.patch in ("", "0"):
            return ""
        return self.patch

    def release_version(self) -> Version:
        """
        Comparable release version following Godot's release order.

        The channel is rendered as a PEP 440 pre-release, so development
        snapshots sort before alphas, then betas, release candidates and the
        stable release (``4.0.0-dev.5`` -> ``4.0.0.dev5``, ``4.0.0-beta.1``
        -> ``4.0.0b1``).

        Raises:
            InvalidVersionError: If the label is not a Godot release channel
        """
        release = f"{self.major}.{self.minor}.{self.patch or 0}"
        if self.channel != "stable":
            if not self.channel[:1].isalpha():
                raise InvalidVersionError(str(self))
            release += f"-{self.channel}"

        try:
            return Version(release)
        except InvalidVersion as e:
            raise InvalidVersionError(str(self)) from e

    def __lt__(self, other: "SemanticVersion") -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.release_version() < other.release_version()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.label:
            text += f"-{self.label}"
        return text


def parse_version(version: str) -> SemanticVersion:
    """
    Parse a semantic version string.

    Build metadata (``+build``) is accepted but discarded.

    Args:
        version: Version string in MAJOR.MINOR.PATCH[-LABEL][+BUILD] form

    Returns:
        Parsed SemanticVersion

    Raises:
        InvalidVersionError: If the string is not a valid semantic version

    Example:
        >>> parse_version("4.0.0-beta1")
        SemanticVersion(major='4', minor='0', patch='0', label='beta1')
    """
    if not isinstance(version, str):
        raise InvalidVersionError(str(version))

    match = SEMANTIC_VERSION_REGEX.fullmatch(version)
    if match is None:
        raise InvalidVersionError(version)

    return SemanticVersion(
        major=match.group(1) or "",
        minor=match.group(2) or "",
        patch=match.group(3) or "",
        label=match.group(4) or "",
    )


def ensure_version(version: Union[str, SemanticVersion]) -> SemanticVersion:
    """Return ``version`` parsed if it is a string, unchanged otherwise."""
    if isinstance(version, SemanticVersion):
        return version
    return parse_version(version)
