"""
Shared utilities for CLI commands.

Provides common functionality used across the CLI commands: building the
layered configuration from parsed arguments and console output helpers.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from godotsetup.config.parser import SetupConfig, load_config

logger = logging.getLogger(__name__)

# Parsed argument name -> SetupConfig field
_OVERRIDE_ARGS = (
    "version",
    "path",
    "downloads_path",
    "bin_path",
    "custom_url",
    "use_dotnet",
    "godot_sharp_release",
    "include_templates",
    "cache",
    "cache_dir",
    "url_scheme",
    "legacy_url_before",
)


# ============================================================================
# Configuration Management
# ============================================================================


def collect_overrides(args) -> Dict[str, Any]:
    """
    Collect explicitly given command-line values.

    Args:
        args: Parsed command-line arguments

    Returns:
        Mapping of config field to value for every flag that was passed
    """
    overrides = {}
    for name in _OVERRIDE_ARGS:
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    return overrides


def build_config(args, environ: Optional[Dict[str, str]] = None) -> SetupConfig:
    """
    Build the layered configuration for a command.

    Args:
        args: Parsed arguments with config, project_root and command flags
        environ: Environment mapping (default: os.environ)

    Returns:
        Validated SetupConfig

    Raises:
        ConfigError: If the configuration is invalid
    """
    return load_config(
        config_file=getattr(args, "config", None),
        project_root=getattr(args, "project_root", None) or Path.cwd(),
        environ=os.environ if environ is None else environ,
        overrides=collect_overrides(args),
    )


def resolve_checkout_dir(args, environ: Optional[Dict[str, str]] = None) -> Path:
    """
    Get the repository checkout directory.

    Returns:
        $GITHUB_WORKSPACE when set, otherwise the project root
    """
    environ = os.environ if environ is None else environ
    workspace = environ.get("GITHUB_WORKSPACE")
    if workspace:
        return Path(workspace)
    return Path(getattr(args, "project_root", None) or Path.cwd())


# ============================================================================
# Console Output
# ============================================================================


def safe_print(message: str, file=None):
    """
    Print message with safe encoding handling for Windows console.

    Falls back to ASCII-safe characters if Unicode emojis can't be encoded.

    Args:
        message: Message to print
        file: Output file (default: stdout)
    """
    try:
        print(message, file=file)
    except UnicodeEncodeError:
        safe_message = (
            message.replace("⚠️", "WARNING:")
            .replace("✅", "[OK]")
            .replace("❌", "[ERROR]")
            .replace("🚀", "[GODOT]")
        )
        print(safe_message.encode("ascii", "replace").decode("ascii"), file=file)
