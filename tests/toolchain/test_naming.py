"""
Unit tests for Godot artifact naming.

Tests filename, URL and export template path derivation for every platform.
"""

from pathlib import PurePosixPath

import pytest

from godotsetup.core.exceptions import InvalidVersionError
from godotsetup.core.platform import HostPlatform
from godotsetup.core.version import SemanticVersion
from godotsetup.toolchain.naming import (
    UrlScheme,
    build_download_url,
    build_export_template_path,
    build_filename,
    build_filename_base,
    build_folder_token,
    resolve_artifact,
    select_url_scheme,
)

RELEASES = "https://github.com/godotengine/godot-builds/releases/download/"
LEGACY = "https://downloads.tuxfamily.org/godotengine/"

LINUX = HostPlatform.LINUX
WINDOWS = HostPlatform.WINDOWS
MACOS = HostPlatform.MACOS


class TestFilenames:
    """Test filename and folder token construction."""

    @pytest.mark.parametrize(
        "version,expected",
        [
            ("4.0.0", "Godot_v4.0-stable"),
            ("3.5.1", "Godot_v3.5.1-stable"),
            ("4.0.0-beta1", "Godot_v4.0-beta1"),
            ("4.0.0-beta.16", "Godot_v4.0-beta16"),
            ("4.1.0-rc.2", "Godot_v4.1-rc2"),
        ],
    )
    def test_filename_base(self, version, expected):
        assert build_filename_base(version) == expected

    @pytest.mark.parametrize(
        "platform,use_dotnet,expected",
        [
            (LINUX, False, "Godot_v4.2.1-stable_linux.x86_64"),
            (LINUX, True, "Godot_v4.2.1-stable_mono_linux_x86_64"),
            (WINDOWS, False, "Godot_v4.2.1-stable_win64.exe"),
            (WINDOWS, True, "Godot_v4.2.1-stable_mono_win64"),
            (MACOS, False, "Godot_v4.2.1-stable_macos.universal"),
            (MACOS, True, "Godot_v4.2.1-stable_mono_macos.universal"),
        ],
    )
    def test_filename(self, platform, use_dotnet, expected):
        assert build_filename("4.2.1", platform, use_dotnet) == expected

    @pytest.mark.parametrize(
        "version,use_dotnet,expected",
        [
            ("4.0.0-beta.1", False, "4.0.beta1"),
            ("3.5.1", True, "3.5.1.stable.mono"),
            ("4.2.0", False, "4.2.stable"),
        ],
    )
    def test_folder_token(self, version, use_dotnet, expected):
        assert build_folder_token(version, use_dotnet) == expected

    @pytest.mark.parametrize("version", ["4.x.0", "4.0", ""])
    def test_invalid_version(self, version):
        with pytest.raises(InvalidVersionError):
            build_filename(version, LINUX, False)


class TestReleaseUrls:
    """Test the release download layout."""

    def test_dotnet_beta_linux(self):
        assert build_download_url("4.0.0-beta1", LINUX, True, False) == (
            RELEASES + "4.0-beta1/Godot_v4.0-beta1_mono_linux_x86_64.zip"
        )

    def test_dotnet_dotted_beta_windows(self):
        assert build_download_url("4.0.0-beta.16", WINDOWS, True, False) == (
            RELEASES + "4.0-beta16/Godot_v4.0-beta16_mono_win64.zip"
        )

    def test_export_templates(self):
        assert build_download_url("4.0.0", LINUX, False, True) == (
            RELEASES + "4.0-stable/Godot_v4.0-stable_export_templates.tpz"
        )

    def test_dotnet_export_templates(self):
        assert build_download_url("4.2.1", MACOS, True, True) == (
            RELEASES + "4.2.1-stable/Godot_v4.2.1-stable_mono_export_templates.tpz"
        )

    def test_windows_standard(self):
        assert build_download_url("4.2.1", WINDOWS, False, False) == (
            RELEASES + "4.2.1-stable/Godot_v4.2.1-stable_win64.exe.zip"
        )

    def test_export_template_url_ignores_platform(self):
        urls = {
            build_download_url("4.1.0", platform, False, True)
            for platform in HostPlatform
        }
        assert len(urls) == 1

    def test_macos_export_templates(self):
        assert build_download_url("4.0.0", MACOS, False, True) == (
            RELEASES + "4.0-stable/Godot_v4.0-stable_export_templates.tpz"
        )

    @pytest.mark.parametrize("scheme", list(UrlScheme))
    @pytest.mark.parametrize("use_dotnet", [False, True])
    @pytest.mark.parametrize("version", ["4.0.0-beta.16", "3.5.1", "4.2.0-dev.5"])
    def test_platforms_share_channel_segment(self, version, use_dotnet, scheme):
        directories = set()
        bases = set()
        for platform in HostPlatform:
            url = build_download_url(version, platform, use_dotnet, False, scheme)
            directory, _, artifact = url.rpartition("/")
            directories.add(directory)
            bases.add(artifact.split("_")[1])

        assert len(directories) == 1
        assert len(bases) == 1


class TestPatchZeroEquivalence:
    """Test a zero patch and an empty patch resolve identically."""

    @pytest.mark.parametrize("scheme", list(UrlScheme))
    @pytest.mark.parametrize("use_dotnet", [False, True])
    @pytest.mark.parametrize("platform", list(HostPlatform))
    def test_resolve_artifact(self, platform, use_dotnet, scheme):
        args = (
            platform,
            use_dotnet,
            PurePosixPath("/home/ci/godot"),
            PurePosixPath("/home/ci"),
            scheme,
        )
        explicit = resolve_artifact("4.0.0", *args)
        normalized = resolve_artifact(SemanticVersion("4", "0", "", ""), *args)

        assert normalized.filename == explicit.filename
        assert normalized.download_url == explicit.download_url
        assert normalized.installed_path == explicit.installed_path
        assert normalized.export_template_url == explicit.export_template_url
        assert normalized.export_template_path == explicit.export_template_path

    @pytest.mark.parametrize("label", ["", "beta.2"])
    def test_name_fragments(self, label):
        normalized = SemanticVersion("4", "0", "", label)
        explicit = SemanticVersion("4", "0", "0", label)

        assert build_filename_base(normalized) == build_filename_base(explicit)
        assert build_folder_token(normalized, True) == (
            build_folder_token(explicit, True)
        )


class TestLegacyUrls:
    """Test the legacy download layout."""

    @pytest.mark.parametrize(
        "version,platform,use_dotnet,expected",
        [
            (
                "4.0.0-beta1",
                LINUX,
                True,
                "4.0/beta1/mono/Godot_v4.0-beta1_mono_linux_x86_64.zip",
            ),
            (
                "4.0.0-beta1",
                MACOS,
                True,
                "4.0/beta1/mono/Godot_v4.0-beta1_mono_macos.universal.zip",
            ),
            (
                "4.0.0-beta.16",
                WINDOWS,
                True,
                "4.0/beta16/mono/Godot_v4.0-beta16_mono_win64.zip",
            ),
            (
                "4.0.0",
                WINDOWS,
                True,
                "4.0/mono/Godot_v4.0-stable_mono_win64.zip",
            ),
            (
                "4.0.0-beta1",
                WINDOWS,
                False,
                "4.0/beta1/Godot_v4.0-beta1_win64.exe.zip",
            ),
            (
                "4.0.0-beta.16",
                LINUX,
                False,
                "4.0/beta16/Godot_v4.0-beta16_linux.x86_64.zip",
            ),
        ],
    )
    def test_legacy_url(self, version, platform, use_dotnet, expected):
        url = build_download_url(version, platform, use_dotnet, False, UrlScheme.LEGACY)
        assert url == LEGACY + expected


class TestSelectUrlScheme:
    """Test select_url_scheme function."""

    def test_default_is_releases(self):
        assert select_url_scheme("3.0.0") is UrlScheme.RELEASES

    def test_explicit_modes(self):
        assert select_url_scheme("4.2.0", "legacy") is UrlScheme.LEGACY
        assert select_url_scheme("4.2.0", "RELEASES") is UrlScheme.RELEASES
        assert select_url_scheme("4.2.0", UrlScheme.LEGACY) is UrlScheme.LEGACY

    def test_auto_without_boundary(self):
        assert select_url_scheme("3.0.0", "auto") is UrlScheme.RELEASES

    def test_auto_with_boundary(self):
        assert select_url_scheme("4.0.0-beta.16", "auto", "4.0.0") is UrlScheme.LEGACY
        assert select_url_scheme("4.0.0", "auto", "4.0.0") is UrlScheme.RELEASES
        assert select_url_scheme("4.2.1", "auto", "4.0.0") is UrlScheme.RELEASES

    @pytest.mark.parametrize(
        "version,expected",
        [
            ("4.0.0-dev.5", UrlScheme.LEGACY),
            ("4.0.0-alpha.3", UrlScheme.LEGACY),
            ("4.0.0-beta.1", UrlScheme.RELEASES),
            ("4.0.0-rc.1", UrlScheme.RELEASES),
        ],
    )
    def test_auto_orders_dev_builds_first(self, version, expected):
        assert select_url_scheme(version, "auto", "4.0.0-beta.1") is expected

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown URL scheme"):
            select_url_scheme("4.2.0", "mirror")


class TestExportTemplatePath:
    """Test build_export_template_path function."""

    def test_godot3_linux_dotnet(self):
        assert build_export_template_path("3.5.1", LINUX, True, "/home/ci") == (
            "/home/ci/.local/share/godot/templates/3.5.1.stable.mono"
        )

    def test_godot4_windows_beta(self):
        assert build_export_template_path(
            "4.0.0-beta.1", WINDOWS, False, "C:\\Users\\ci"
        ) == ("C:/Users/ci/AppData/Roaming/Godot/export_templates/4.0.beta1")

    def test_godot4_macos(self):
        assert build_export_template_path("4.2.1", MACOS, False, "/Users/ci") == (
            "/Users/ci/Library/Application Support/Godot/export_templates/4.2.1.stable"
        )

    def test_no_backslashes(self):
        path = build_export_template_path("4.2.0", WINDOWS, True, "C:\\Users\\ci\\")
        assert "\\" not in path
        assert "//" not in path


class TestResolveArtifact:
    """Test resolve_artifact function."""

    def test_linux_bundle(self):
        artifact = resolve_artifact(
            "4.2.1",
            LINUX,
            False,
            PurePosixPath("/home/ci/godot"),
            PurePosixPath("/home/ci"),
        )

        assert artifact.filename == "Godot_v4.2.1-stable_linux.x86_64"
        assert artifact.download_url == (
            RELEASES + "4.2.1-stable/Godot_v4.2.1-stable_linux.x86_64.zip"
        )
        assert artifact.installed_path == PurePosixPath(
            "/home/ci/godot/Godot_v4.2.1-stable_linux.x86_64"
        )
        assert artifact.export_template_url == (
            RELEASES + "4.2.1-stable/Godot_v4.2.1-stable_export_templates.tpz"
        )
        assert artifact.export_template_path == (
            "/home/ci/.local/share/godot/export_templates/4.2.1.stable"
        )

    def test_macos_dotnet_app_bundle(self):
        artifact = resolve_artifact(
            "4.2.1",
            MACOS,
            True,
            PurePosixPath("/Users/ci/godot"),
            PurePosixPath("/Users/ci"),
            UrlScheme.LEGACY,
        )

        assert artifact.installed_path == PurePosixPath("/Users/ci/godot/Godot_mono.app")
        assert artifact.download_url == (
            LEGACY + "4.2.1/mono/Godot_v4.2.1-stable_mono_macos.universal.zip"
        )

    def test_invalid_version(self):
        with pytest.raises(InvalidVersionError):
            resolve_artifact("latest", LINUX, False, "/home/ci/godot", "/home/ci")
