"""
Host platform descriptors for godotsetup.

Godot ships differently named archives for every desktop operating system
and lays out their contents differently. This module isolates those
differences behind a single closed enumeration so the naming code stays
OS-agnostic.

Features:
- Host OS detection (Linux, Windows, macOS)
- Per-OS archive filename suffixes (standard and .NET builds)
- Per-OS Godot executable recognition
- Per-OS unzipped installation path rules
- Per-OS export template base directory

Usage:
    from godotsetup.core.platform import detect_host_platform, get_platform

    host = detect_host_platform()
    print(host.filename_suffix(use_dotnet=False))

    windows = get_platform("win32")
    print(windows.is_godot_executable("Godot_v4.2-stable_win64.exe"))
"""

import platform
from enum import Enum
from pathlib import PurePath
from typing import Union

from godotsetup.core.exceptions import UnsupportedPlatformError


class HostPlatform(Enum):
    """Supported host operating systems."""

    LINUX = "linux"
    WINDOWS = "windows"
    MACOS = "macos"

    def filename_suffix(self, use_dotnet: bool) -> str:
        """
        Get the archive filename suffix for this platform.

        Args:
            use_dotnet: True for the .NET-enabled (mono) build

        Returns:
            Suffix appended to the filename base (e.g. '_linux.x86_64')

        Example:
            >>> HostPlatform.LINUX.filename_suffix(True)
            '_mono_linux_x86_64'
        """
        if self is HostPlatform.LINUX:
            return "_mono_linux_x86_64" if use_dotnet else "_linux.x86_64"
        elif self is HostPlatform.WINDOWS:
            return "_mono_win64" if use_dotnet else "_win64.exe"
        else:
            return "_mono_macos.universal" if use_dotnet else "_macos.universal"

    def is_godot_executable(self, basename: str) -> bool:
        """
        Check whether a file basename is most likely the Godot executable.

        Args:
            basename: File basename to check

        Returns:
            True if the basename matches this platform's executable naming
        """
        name = basename.lower()
        if self is HostPlatform.LINUX:
            return name.endswith("x86_64")
        elif self is HostPlatform.WINDOWS:
            return name.endswith("_win64.exe")
        else:
            return name == "godot"

    def unzipped_path(
        self,
        installation_dir: Union[str, PurePath],
        version_name: str,
        use_dotnet: bool,
    ) -> PurePath:
        """
        Get the path the engine archive unpacks to.

        Linux and Windows archives contain a folder named after the archive;
        macOS archives contain an application bundle.

        Args:
            installation_dir: Directory the archive is extracted into
            version_name: Archive filename without extension
            use_dotnet: True for the .NET-enabled build

        Returns:
            Path of the unzipped installation
        """
        installation_dir = _as_path(installation_dir)
        if self is HostPlatform.MACOS:
            return installation_dir / ("Godot_mono.app" if use_dotnet else "Godot.app")
        return installation_dir / version_name

    def export_template_base_dir(self, home: Union[str, PurePath]) -> PurePath:
        """
        Get the per-user Godot data directory holding export templates.

        Args:
            home: User home directory

        Returns:
            Linux: ~/.local/share/godot
            Windows: ~/AppData/Roaming/Godot
            macOS: ~/Library/Application Support/Godot
        """
        home = _as_path(home)
        if self is HostPlatform.LINUX:
            return home / ".local" / "share" / "godot"
        elif self is HostPlatform.WINDOWS:
            return home / "AppData" / "Roaming" / "Godot"
        else:
            return home / "Library" / "Application Support" / "Godot"

    @property
    def display_name(self) -> str:
        """Human-readable platform name."""
        return {
            HostPlatform.LINUX: "Linux",
            HostPlatform.WINDOWS: "Windows",
            HostPlatform.MACOS: "macOS",
        }[self]


# Accepted host identifiers: sys.platform values, platform.system() values
# and the enum values themselves.
_HOST_ALIASES = {
    "linux": HostPlatform.LINUX,
    "win32": HostPlatform.WINDOWS,
    "windows": HostPlatform.WINDOWS,
    "darwin": HostPlatform.MACOS,
    "macos": HostPlatform.MACOS,
}


def _as_path(path: Union[str, PurePath]) -> PurePath:
    if isinstance(path, PurePath):
        return path
    return PurePath(path)


def get_platform(host_id: str) -> HostPlatform:
    """
    Get the platform descriptor for a host identifier.

    Args:
        host_id: Host OS identifier ('linux', 'win32', 'windows', 'darwin', 'macos')

    Returns:
        Matching HostPlatform member

    Raises:
        UnsupportedPlatformError: If the identifier is not recognized

    Example:
        >>> get_platform("darwin")
        <HostPlatform.MACOS: 'macos'>
    """
    if isinstance(host_id, HostPlatform):
        return host_id

    key = (host_id or "").strip().lower()
    if key not in _HOST_ALIASES:
        raise UnsupportedPlatformError(host_id)
    return _HOST_ALIASES[key]


def detect_host_platform() -> HostPlatform:
    """
    Detect the platform descriptor for the running host.

    Returns:
        HostPlatform for the current operating system

    Raises:
        UnsupportedPlatformError: If the OS is not Linux, Windows or macOS
    """
    return get_platform(platform.system())


def get_supported_platforms() -> list:
    """Get the identifiers of all supported platforms."""
    return [member.value for member in HostPlatform]
