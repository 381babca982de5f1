"""
Godot artifact resolution and installation.

This package derives download URLs and install paths for Godot builds and
orchestrates their installation.
"""

from .naming import (
    UrlScheme,
    ResolvedArtifact,
    build_filename,
    build_download_url,
    build_export_template_path,
    select_url_scheme,
    resolve_artifact,
)

from .installer import (
    GodotInstaller,
    InstallPlan,
    InstallResult,
)

__all__ = [
    "UrlScheme",
    "ResolvedArtifact",
    "build_filename",
    "build_download_url",
    "build_export_template_path",
    "select_url_scheme",
    "resolve_artifact",
    "GodotInstaller",
    "InstallPlan",
    "InstallResult",
]
