"""
Godot artifact naming: filenames, download URLs and export template paths.

This module reproduces the upstream Godot release naming convention so that
the URLs it produces match the real hosted artifacts. All functions are pure:
the same version, platform and flags always produce the same names, and
nothing here touches the network, the filesystem or the logger.

Two upstream layouts are supported:

- ``UrlScheme.RELEASES``: GitHub release assets of ``godotengine/godot-builds``
  (``.../download/4.0-beta1/Godot_v4.0-beta1_linux.x86_64.zip``)
- ``UrlScheme.LEGACY``: the former per-file host
  (``.../godotengine/4.0/beta1/mono/Godot_v4.0-beta1_mono_linux_x86_64.zip``)

A patch number of ``0`` is omitted everywhere, so ``4.0.0`` and ``4.0``
produce identical names.

Usage:
    from godotsetup.core.platform import get_platform
    from godotsetup.toolchain.naming import resolve_artifact

    artifact = resolve_artifact("4.2.1", get_platform("linux"), use_dotnet=False,
                                installation_dir="/home/ci/godot", home="/home/ci")
    print(artifact.download_url)
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Optional, Union

from godotsetup.core.filesystem import normalize_separators
from godotsetup.core.platform import HostPlatform
from godotsetup.core.version import SemanticVersion, ensure_version

GODOT_URL_PREFIX = "https://github.com/godotengine/godot-builds/releases/download/"
GODOT_LEGACY_URL_PREFIX = "https://downloads.tuxfamily.org/godotengine/"
GODOT_FILENAME_PREFIX = "Godot_v"

VersionLike = Union[str, SemanticVersion]


class UrlScheme(Enum):
    """Upstream download layouts."""

    RELEASES = "releases"
    LEGACY = "legacy"


@dataclass(frozen=True)
class ResolvedArtifact:
    """Names and locations derived from one version/platform/flag combination."""

    version: SemanticVersion
    platform: HostPlatform
    use_dotnet: bool
    filename: str
    """Archive name without extension, also the unzipped folder name"""

    download_url: str
    installed_path: PurePath
    export_template_url: str
    export_template_path: str
    """Forward-slash normalized export template directory"""


# ============================================================================
# Name Fragments
# ============================================================================


def _release_number(version: SemanticVersion) -> str:
    """'{major}.{minor}[.{patch}]' with a zero patch omitted."""
    number = f"{version.major}.{version.minor}"
    if version.significant_patch:
        number += f".{version.significant_patch}"
    return number


def build_filename_base(version: VersionLike) -> str:
    """
    Build the platform-independent part of a Godot archive name.

    Args:
        version: Version string or parsed SemanticVersion

    Returns:
        Filename base, e.g. 'Godot_v4.0-beta16' or 'Godot_v3.5.1-stable'

    Raises:
        InvalidVersionError: If a version string is malformed

    Example:
        >>> build_filename_base("4.0.0-beta.16")
        'Godot_v4.0-beta16'
    """
    version = ensure_version(version)

    filename = GODOT_FILENAME_PREFIX + version.major
    if version.minor:
        filename += f".{version.minor}"
    if version.significant_patch:
        filename += f".{version.significant_patch}"
    filename += f"-{version.channel}"
    return filename


def build_filename(
    version: VersionLike, platform: HostPlatform, use_dotnet: bool
) -> str:
    """
    Build the full archive name (without '.zip') for a platform.

    Example:
        >>> build_filename("4.0.0", HostPlatform.WINDOWS, False)
        'Godot_v4.0-stable_win64.exe'
    """
    return build_filename_base(version) + platform.filename_suffix(use_dotnet)


def build_folder_token(version: VersionLike, use_dotnet: bool) -> str:
    """
    Build the directory name Godot uses for installed export templates.

    Unlike filenames, every segment is dot-separated: '4.0.beta1',
    '3.5.1.stable.mono'.

    Args:
        version: Version string or parsed SemanticVersion
        use_dotnet: True to append the '.mono' segment

    Returns:
        Folder token string
    """
    version = ensure_version(version)

    token = version.major
    if version.minor:
        token += f".{version.minor}"
    if version.significant_patch:
        token += f".{version.significant_patch}"
    token += f".{version.channel}"
    if use_dotnet:
        token += ".mono"
    return token


def _build_artifact_name(
    version: SemanticVersion,
    platform: HostPlatform,
    use_dotnet: bool,
    want_export_template: bool,
) -> str:
    if want_export_template:
        mono = "_mono" if use_dotnet else ""
        return f"{build_filename_base(version)}{mono}_export_templates.tpz"
    return f"{build_filename(version, platform, use_dotnet)}.zip"


# ============================================================================
# URLs
# ============================================================================


def build_download_url(
    version: VersionLike,
    platform: HostPlatform,
    use_dotnet: bool,
    want_export_template: bool,
    scheme: UrlScheme = UrlScheme.RELEASES,
) -> str:
    """
    Build the download URL of a Godot archive or export template bundle.

    Args:
        version: Version string or parsed SemanticVersion
        platform: Host platform descriptor
        use_dotnet: True for the .NET-enabled build
        want_export_template: True for the export templates (.tpz) URL
        scheme: Upstream layout to target

    Returns:
        Download URL

    Raises:
        InvalidVersionError: If a version string is malformed

    Example:
        >>> build_download_url("4.0.0-beta1", HostPlatform.LINUX, True, False)
        'https://github.com/godotengine/godot-builds/releases/download/4.0-beta1/Godot_v4.0-beta1_mono_linux_x86_64.zip'
    """
    version = ensure_version(version)
    artifact = _build_artifact_name(version, platform, use_dotnet, want_export_template)

    if scheme is UrlScheme.LEGACY:
        url = f"{GODOT_LEGACY_URL_PREFIX}{_release_number(version)}/"
        if version.is_prerelease:
            url += f"{version.channel}/"
        if use_dotnet:
            url += "mono/"
        return url + artifact

    return f"{GODOT_URL_PREFIX}{_release_number(version)}-{version.channel}/{artifact}"


def select_url_scheme(
    version: VersionLike,
    mode: Union[str, UrlScheme] = UrlScheme.RELEASES,
    legacy_before: Optional[VersionLike] = None,
) -> UrlScheme:
    """
    Choose the upstream layout for a version.

    Args:
        version: Requested version
        mode: 'releases', 'legacy' or 'auto'
        legacy_before: In 'auto' mode, versions preceding this one use the
            legacy layout. Without it, 'auto' always picks the release layout.

    Returns:
        Selected UrlScheme

    Raises:
        ValueError: If mode is not recognized
        InvalidVersionError: If a version string is malformed
    """
    if isinstance(mode, UrlScheme):
        return mode

    mode = mode.lower()
    if mode == "auto":
        if legacy_before is None or legacy_before == "":
            return UrlScheme.RELEASES
        if ensure_version(version) < ensure_version(legacy_before):
            return UrlScheme.LEGACY
        return UrlScheme.RELEASES

    try:
        return UrlScheme(mode)
    except ValueError:
        raise ValueError(
            f"Unknown URL scheme: {mode!r} (expected releases, legacy or auto)"
        )


# ============================================================================
# Local Paths
# ============================================================================


def export_templates_dirname(version: VersionLike) -> str:
    """Directory name holding export templates: 'export_templates' from Godot 4 on."""
    version = ensure_version(version)
    return "export_templates" if int(version.major) >= 4 else "templates"


def build_export_template_path(
    version: VersionLike,
    platform: HostPlatform,
    use_dotnet: bool,
    home: Union[str, PurePath],
) -> str:
    """
    Build the local directory Godot looks up export templates in.

    Separators are normalized to forward slashes on every host so cache keys
    and comparisons do not depend on the OS.

    Args:
        version: Version string or parsed SemanticVersion
        platform: Host platform descriptor
        use_dotnet: True for the .NET-enabled build
        home: User home directory

    Returns:
        Export template directory path

    Example:
        >>> build_export_template_path("3.5.1", HostPlatform.LINUX, True, "/home/ci")
        '/home/ci/.local/share/godot/templates/3.5.1.stable.mono'
    """
    version = ensure_version(version)
    path = (
        platform.export_template_base_dir(home)
        / export_templates_dirname(version)
        / build_folder_token(version, use_dotnet)
    )
    return normalize_separators(str(path))


def resolve_artifact(
    version_string: VersionLike,
    platform: HostPlatform,
    use_dotnet: bool,
    installation_dir: Union[str, PurePath],
    home: Union[str, PurePath],
    scheme: UrlScheme = UrlScheme.RELEASES,
) -> ResolvedArtifact:
    """
    Resolve every name and location needed to install one Godot version.

    Args:
        version_string: Version string to parse, or an already parsed version
        platform: Host platform descriptor
        use_dotnet: True for the .NET-enabled build
        installation_dir: Directory the engine archive is extracted into
        home: User home directory (export templates live below it)
        scheme: Upstream layout to target

    Returns:
        ResolvedArtifact bundle

    Raises:
        InvalidVersionError: If the version string is malformed
    """
    version = ensure_version(version_string)
    filename = build_filename(version, platform, use_dotnet)

    return ResolvedArtifact(
        version=version,
        platform=platform,
        use_dotnet=use_dotnet,
        filename=filename,
        download_url=build_download_url(version, platform, use_dotnet, False, scheme),
        installed_path=platform.unzipped_path(installation_dir, filename, use_dotnet),
        export_template_url=build_download_url(
            version, platform, use_dotnet, True, scheme
        ),
        export_template_path=build_export_template_path(
            version, platform, use_dotnet, home
        ),
    )
