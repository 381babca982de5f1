"""
Install command implementation.

Installs Godot (and optionally its export templates) and exposes the
executable to later CI steps through the bin directory and GODOT/GODOT4.
"""

import logging

from godotsetup.cli.utils import build_config, resolve_checkout_dir, safe_print
from godotsetup.toolchain.installer import GodotInstaller

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = build_config(args)
    logger.debug(f"Configuration: {config}")

    installer = GodotInstaller(config, checkout_dir=resolve_checkout_dir(args))
    result = installer.install()

    source = "cache" if result.was_cached else "download"
    safe_print(f"✅ Godot {result.version_name} installed from {source}")
    safe_print(f"   Executable: {result.alias_path} -> {result.executable_path}")
    if result.godot_sharp_path:
        safe_print(f"   GodotSharp: {result.godot_sharp_path}")
    if result.export_template_path:
        safe_print(f"   Export templates: {result.export_template_path}")

    return 0
