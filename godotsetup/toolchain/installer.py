"""
Godot installation orchestration.

This module ties the naming rules to the side-effecting collaborators:
the download manager, archive extraction, the artifact cache, the bin
directory link manager and the CI environment exporter. Every collaborator
is injectable so the whole sequence can run against local fixtures.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from godotsetup.caching.store import ArtifactCache
from godotsetup.config.parser import SetupConfig
from godotsetup.core.download import DownloadProgress, download_file, format_progress
from godotsetup.core.environment import EnvironmentExporter
from godotsetup.core.exceptions import (
    ArtifactNotFoundError,
    MissingRuntimeComponentError,
)
from godotsetup.core.filesystem import (
    ensure_directory,
    extract_archive,
    find_executables,
    is_executable_file,
    remove_path,
)
from godotsetup.core.platform import HostPlatform, detect_host_platform
from godotsetup.toolchain.linking import GodotLinkManager
from godotsetup.toolchain.naming import (
    ResolvedArtifact,
    resolve_artifact,
    select_url_scheme,
)
from godotsetup.toolchain.version_source import resolve_version_input

logger = logging.getLogger(__name__)

CUSTOM_VERSION_NAME = "custom_godot"
EXPORT_TEMPLATES_ARCHIVE = "export_templates.tpz"
EXTRACTED_TEMPLATES_DIRNAME = "templates"
NO_TEMPLATES_KEY_SUFFIX = "-no-templates"
GODOT_ALIAS_NAME = "godot"
GODOT_SHARP_ALIAS_NAME = "GodotSharp"


@dataclass
class InstallResult:
    """Result of a Godot installation."""

    version_name: str
    """Archive name without extension ('custom_godot' for custom builds)"""

    artifact: Optional[ResolvedArtifact]
    """Resolved names and URLs (None for custom builds)"""

    installed_path: Path
    """Path the engine archive unpacked to"""

    executable_path: Path
    """Godot executable inside the installation"""

    godot_sharp_path: Optional[Path]
    """Selected GodotSharp.dll (None without .NET)"""

    alias_path: Path
    """Stable '{bin}/godot' link exported as GODOT and GODOT4"""

    export_template_path: Optional[Path]
    """Installed export templates (None when not included)"""

    was_cached: bool
    """Whether the installation was restored from the cache"""


@dataclass
class InstallPlan:
    """Names, URLs and paths resolved for one installation."""

    version_name: str
    artifact: Optional[ResolvedArtifact]
    download_url: str
    installed_path: Path
    include_templates: bool
    export_template_url: str
    export_template_path: Optional[Path]


def cache_key_for(download_url: str, include_templates: bool) -> str:
    """
    Build the cache key for an installation.

    Example:
        >>> cache_key_for("https://example.com/Godot.zip", False)
        'https://example.com/Godot.zip-no-templates'
    """
    if include_templates:
        return download_url
    return download_url + NO_TEMPLATES_KEY_SUFFIX


def download_with_progress_log(url: str, destination: Path) -> Path:
    """Download a file, logging progress at debug level."""

    def report(progress: DownloadProgress):
        logger.debug(f"  {format_progress(progress)}")

    return download_file(url, destination, progress_callback=report)


def select_godot_sharp(
    executables: List[Path], release: bool
) -> Optional[Path]:
    """
    Pick the GodotSharp.dll of the requested build flavor.

    Args:
        executables: Candidate paths
        release: True for the release assemblies, False for debug

    Returns:
        First matching path, or None
    """
    flavor = "release" if release else "debug"
    for executable in executables:
        lowered = str(executable).lower()
        if lowered.endswith("godotsharp.dll") and flavor in lowered:
            return executable
    return None


class GodotInstaller:
    """
    Installs a Godot build and exposes it to later CI steps.

    Example:
        >>> config = load_config(environ=os.environ)
        >>> result = GodotInstaller(config).install()
        >>> print(f"Godot available at: {result.alias_path}")
    """

    def __init__(
        self,
        config: SetupConfig,
        platform: Optional[HostPlatform] = None,
        home: Optional[Path] = None,
        checkout_dir: Optional[Path] = None,
        cache: Optional[ArtifactCache] = None,
        downloader: Optional[Callable[[str, Path], Path]] = None,
        extractor: Callable[[Path, Path], Path] = extract_archive,
        exporter: Optional[EnvironmentExporter] = None,
        link_manager: Optional[GodotLinkManager] = None,
    ):
        """
        Initialize installer.

        Args:
            config: Layered configuration
            platform: Host platform (default: detected)
            home: User home directory (default: Path.home())
            checkout_dir: Repository checkout (default: $GITHUB_WORKSPACE or cwd)
            cache: Artifact cache (default: one at config.cache_dir)
            downloader: Callable(url, destination) -> Path
            extractor: Callable(archive, destination) -> Path
            exporter: Environment exporter (default: os.environ based)
            link_manager: Bin directory link manager
        """
        self.config = config
        self.platform = platform or detect_host_platform()
        self.home = Path(home) if home else Path.home()
        if checkout_dir is None:
            checkout_dir = Path(os.environ.get("GITHUB_WORKSPACE") or Path.cwd())
        self.checkout_dir = Path(checkout_dir)
        self.cache = cache or ArtifactCache(
            Path(config.cache_dir).expanduser() if config.cache_dir else None
        )
        self.download = downloader or download_with_progress_log
        self.extract = extractor
        self.exporter = exporter or EnvironmentExporter()
        self.link_manager = link_manager or GodotLinkManager()

        self.installation_dir = config.resolve_dir(config.path, self.home)
        self.downloads_dir = config.resolve_dir(config.downloads_path, self.home)
        self.bin_dir = config.resolve_dir(config.bin_path, self.home)

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def plan(self) -> InstallPlan:
        """
        Resolve names, URLs and paths without touching the filesystem.

        Raises:
            VersionSourceError: If a referenced global.json cannot be used
            InvalidVersionError: If the version is malformed
        """
        config = self.config

        if config.uses_custom_build:
            logger.info(f"😎 Using custom Godot build from {config.custom_url}")
            if config.include_templates:
                logger.warning(
                    "⚠️  Templates are not supported with custom builds. "
                    "Skipping templates."
                )
            return InstallPlan(
                version_name=CUSTOM_VERSION_NAME,
                artifact=None,
                download_url=config.custom_url,
                installed_path=Path(
                    self.platform.unzipped_path(
                        self.installation_dir, CUSTOM_VERSION_NAME, config.use_dotnet
                    )
                ),
                include_templates=False,
                export_template_url="",
                export_template_path=None,
            )

        version = resolve_version_input(config.version, self.checkout_dir)
        scheme = select_url_scheme(
            version, config.url_scheme, config.legacy_url_before
        )
        artifact = resolve_artifact(
            version,
            self.platform,
            config.use_dotnet,
            self.installation_dir,
            self.home,
            scheme,
        )
        include_templates = config.include_templates

        return InstallPlan(
            version_name=artifact.filename,
            artifact=artifact,
            download_url=artifact.download_url,
            installed_path=Path(artifact.installed_path),
            include_templates=include_templates,
            export_template_url=(
                artifact.export_template_url if include_templates else ""
            ),
            export_template_path=(
                Path(artifact.export_template_path) if include_templates else None
            ),
        )

    # ------------------------------------------------------------------
    # Installation
    # ------------------------------------------------------------------

    def install(self) -> InstallResult:
        """
        Install Godot, using the cache when possible.

        Returns:
            InstallResult with installation details

        Raises:
            GodotSetupError: If resolution or installation fails
            DownloadError: If a download fails
            ArchiveExtractionError: If an archive cannot be extracted
        """
        config = self.config
        plan = self.plan()
        godot_download_path = self.downloads_dir / f"{plan.version_name}.zip"
        template_download_path = self.downloads_dir / EXPORT_TEMPLATES_ARCHIVE

        self._log_environment(plan, godot_download_path)

        logger.info("📂 Ensuring working directories exist...")
        for directory in (self.downloads_dir, self.installation_dir, self.bin_dir):
            ensure_directory(directory)
        logger.info("✅ Working directories exist")

        cached_paths = [plan.installed_path]
        if plan.include_templates:
            cached_paths.append(plan.export_template_path)
        cache_key = cache_key_for(plan.download_url, plan.include_templates)

        logger.info("🤔 Checking if Godot is already in cache...")
        was_cached = False
        if config.cache:
            # Restored files replace every previously installed version
            remove_path(self.installation_dir)
            ensure_directory(self.installation_dir)
            was_cached = self.cache.restore(cached_paths, cache_key)
        else:
            logger.info("⏭️ Not using cache")

        if not was_cached:
            logger.info("🙃 Previous Godot download not found in cache")
            executables = self._download_and_extract(plan, godot_download_path)

            if plan.include_templates:
                self._install_export_templates(plan, template_download_path)

            if config.cache:
                logger.info("💾 Saving extracted Godot download to cache...")
                self.cache.save(cached_paths, cache_key)
                logger.info("✅ Godot saved to cache")
        else:
            logger.info("🎉 Previous Godot download found in cache!")
            logger.info("📄 Showing cached files recursively...")
            executables = self._find_executables(self.installation_dir)
            logger.info("✅ Files shown")

        logger.info("🚀 Executables:")
        for executable in executables:
            logger.info(f"  🚀 {executable}")

        godot_executable = next(
            (
                exe
                for exe in executables
                if self.platform.is_godot_executable(exe.name)
            ),
            None,
        )
        godot_sharp = select_godot_sharp(executables, config.godot_sharp_release)

        if godot_executable is None:
            raise ArtifactNotFoundError(self.installation_dir)
        if config.use_dotnet and godot_sharp is None:
            raise MissingRuntimeComponentError(
                "release" if config.godot_sharp_release else "debug"
            )

        logger.info(f"🚀 Godot executable found at {godot_executable}")
        if config.use_dotnet:
            logger.info(f"🚀 GodotSharp.dll found at {godot_sharp}")

        alias_path = self._expose(godot_executable, godot_sharp)

        logger.info("✅ Finished!")
        return InstallResult(
            version_name=plan.version_name,
            artifact=plan.artifact,
            installed_path=plan.installed_path,
            executable_path=godot_executable,
            godot_sharp_path=godot_sharp if config.use_dotnet else None,
            alias_path=alias_path,
            export_template_path=plan.export_template_path,
            was_cached=was_cached,
        )

    def _log_environment(self, plan: InstallPlan, godot_download_path: Path) -> None:
        config = self.config
        logger.info("🏝 Environment Information")
        logger.info(f"🖥 Platform: {self.platform.display_name}")
        logger.info(f"📁 Checkout directory: {self.checkout_dir}")
        if plan.artifact is not None:
            logger.info(f"🤖 Godot version: {plan.artifact.version}")
        else:
            logger.info(f"🤖 Godot version: {plan.version_name}")
        logger.info(f"🤖 Godot version name: {plan.version_name}")
        logger.info(f"🟣 Use .NET: {config.use_dotnet}")
        logger.info(f"🤖 Godot download url: {plan.download_url}")
        logger.info(f"🧑‍💼 User directory: {self.home}")
        logger.info(f"🌏 Downloads directory: {self.downloads_dir}")
        logger.info(f"📥 Godot download path: {godot_download_path}")
        logger.info(f"📦 Godot installation directory: {self.installation_dir}")
        logger.info(f"🤖 Godot installation path: {plan.installed_path}")
        if plan.include_templates:
            logger.info(f"🤖 Export Template url: {plan.export_template_url}")
            logger.info(f"🤖 Export Template Path: {plan.export_template_path}")
        else:
            logger.info("⏭️ Skipping Export Templates.")
        logger.info(f"📂 Bin directory: {self.bin_dir}")
        logger.info(f"🤖 GodotSharp release: {config.godot_sharp_release}")

    def _find_executables(self, directory: Path) -> List[Path]:
        windows = self.platform is HostPlatform.WINDOWS
        return find_executables(
            directory, lambda path: is_executable_file(path, windows=windows)
        )

    def _download_and_extract(
        self, plan: InstallPlan, godot_download_path: Path
    ) -> List[Path]:
        """Download the engine archive and unpack it into a clean directory."""
        logger.info(f"📥 Downloading Godot to {godot_download_path}...")
        remove_path(godot_download_path)
        downloaded = self.download(plan.download_url, godot_download_path)
        logger.info(f"✅ Godot downloaded to {downloaded}")

        # Removing the whole directory uninstalls other versions
        logger.info(f"📦 Extracting Godot to {self.installation_dir}...")
        remove_path(self.installation_dir)
        extracted = self.extract(Path(downloaded), self.installation_dir)
        logger.info(f"✅ Godot extracted to {extracted}")

        logger.info("📄 Showing extracted files recursively...")
        executables = self._find_executables(self.installation_dir)
        logger.info("✅ Files shown")
        return executables

    def _install_export_templates(
        self, plan: InstallPlan, template_download_path: Path
    ) -> None:
        """Download export templates and move them to Godot's lookup directory."""
        template_path = plan.export_template_path

        logger.info(f"📥 Downloading Export Templates to {template_download_path}...")
        remove_path(template_download_path)
        downloaded = self.download(plan.export_template_url, template_download_path)
        logger.info(f"✅ Export Templates downloaded to {downloaded}")

        logger.info(f"📦 Extracting Export Templates to {template_path}...")
        remove_path(template_path)
        extracted = Path(self.extract(Path(downloaded), template_path.parent))
        logger.info(f"✅ Export Templates extracted to {extracted}")

        # Bundles unpack to a generic 'templates' folder
        (extracted / EXTRACTED_TEMPLATES_DIRNAME).rename(template_path)
        logger.info(f"✅ templates moved to {template_path}")

        logger.info("📄 Showing extracted files recursively...")
        self._find_executables(template_path)
        logger.info("✅ Files shown")

    def _expose(self, godot_executable: Path, godot_sharp: Optional[Path]) -> Path:
        """Link the executables into the bin directory and export variables."""
        logger.info("🔦 Update PATH...")
        self.exporter.add_path(self.bin_dir)
        logger.info(f"🔦 Added Bin Directory to PATH: {self.bin_dir}")

        logger.info("🔗 Creating symlinks to executables...")
        self.link_manager.reset_directory(self.bin_dir)

        alias_path = self.bin_dir / GODOT_ALIAS_NAME
        self.link_manager.link_file(alias_path, godot_executable)
        logger.info("✅ Symlink to Godot created")

        if self.config.use_dotnet:
            # {root}/GodotSharp/Api/{Debug,Release}/GodotSharp.dll
            sharp_alias = self.bin_dir / GODOT_SHARP_ALIAS_NAME
            sharp_root = godot_sharp.parent.parent.parent
            self.link_manager.link_directory(sharp_alias, sharp_root)
            logger.info(f"✅ Symlink to GodotSharp created at {sharp_alias}")

        logger.info("🔧 Adding environment variables...")
        for name in ("GODOT", "GODOT4"):
            self.exporter.export_variable(name, alias_path)
            logger.info(f"  {name}={alias_path}")
        logger.info("✅ Environment variables added")

        return alias_path
