"""
Core functionality for godotsetup.

This package contains the foundational modules that other components depend on.
"""

from .exceptions import (
    GodotSetupError,
    InvalidVersionError,
    UnsupportedPlatformError,
    VersionSourceError,
    InstallationError,
    ArtifactNotFoundError,
    MissingRuntimeComponentError,
    ConfigError,
    CacheError,
)

from .version import (
    SemanticVersion,
    parse_version,
)

from .platform import (
    HostPlatform,
    get_platform,
    detect_host_platform,
    get_supported_platforms,
)

__all__ = [
    # Exceptions
    "GodotSetupError",
    "InvalidVersionError",
    "UnsupportedPlatformError",
    "VersionSourceError",
    "InstallationError",
    "ArtifactNotFoundError",
    "MissingRuntimeComponentError",
    "ConfigError",
    "CacheError",
    # Version
    "SemanticVersion",
    "parse_version",
    # Platform
    "HostPlatform",
    "get_platform",
    "detect_host_platform",
    "get_supported_platforms",
]
