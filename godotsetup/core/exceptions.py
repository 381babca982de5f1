"""
Centralized exception hierarchy for godotsetup.

This module defines the custom exceptions raised by the version parser,
the platform descriptor and the installation orchestrator so that callers
can tell invalid input apart from installation failures.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class GodotSetupError(Exception):
    """Base exception for all godotsetup errors."""

    pass


# ============================================================================
# Resolution Exceptions
# ============================================================================


class InvalidVersionError(GodotSetupError):
    """Raised when a version string does not match the semantic version grammar."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Invalid version: {version!r}")


class UnsupportedPlatformError(GodotSetupError):
    """Raised when the host operating system is not Linux, Windows or macOS."""

    def __init__(self, platform_name: str):
        self.platform_name = platform_name
        super().__init__(f"Unrecognized platform: {platform_name!r}")


class VersionSourceError(GodotSetupError):
    """Raised when a version cannot be read from a global.json file."""

    pass


# ============================================================================
# Installation Exceptions
# ============================================================================


class InstallationError(GodotSetupError):
    """Base exception for installation failures."""

    pass


class ArtifactNotFoundError(InstallationError):
    """Raised when no Godot executable is found after extraction."""

    def __init__(self, search_dir=None):
        self.search_dir = search_dir
        msg = "No Godot executable found"
        if search_dir is not None:
            msg += f" in {search_dir}"
        super().__init__(msg)


class MissingRuntimeComponentError(InstallationError):
    """Raised when .NET is requested but no matching GodotSharp.dll exists."""

    def __init__(self, flavor: str):
        self.flavor = flavor
        super().__init__(f"No GodotSharp.dll found for {flavor} build")


# ============================================================================
# Configuration and Cache Exceptions
# ============================================================================


class ConfigError(GodotSetupError):
    """Configuration parsing or validation error."""

    pass


class CacheError(GodotSetupError):
    """Raised when the artifact cache cannot be read or written."""

    pass
