"""
Resolve command implementation.

Prints the file names, download URLs and install paths a version resolves
to, without downloading anything.
"""

import json
import logging

from godotsetup.cli.utils import build_config, resolve_checkout_dir, safe_print
from godotsetup.core.platform import get_platform
from godotsetup.toolchain.installer import GodotInstaller, cache_key_for

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the resolve command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = build_config(args)
    platform = get_platform(args.platform) if args.platform else None

    installer = GodotInstaller(
        config, platform=platform, checkout_dir=resolve_checkout_dir(args)
    )
    plan = installer.plan()

    info = {
        "platform": installer.platform.value,
        "version": str(plan.artifact.version) if plan.artifact else None,
        "version_name": plan.version_name,
        "download_url": plan.download_url,
        "installed_path": str(plan.installed_path),
        "export_template_url": plan.export_template_url or None,
        "export_template_path": (
            str(plan.export_template_path) if plan.export_template_path else None
        ),
        "cache_key": cache_key_for(plan.download_url, plan.include_templates),
    }

    if args.json:
        print(json.dumps(info, indent=2))
        return 0

    width = max(len(key) for key in info)
    for key, value in info.items():
        if value is not None:
            safe_print(f"{key.ljust(width)}  {value}")

    return 0
