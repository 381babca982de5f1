"""
Version input resolution.

A requested version is normally a literal semantic version. When it names
a ``global.json`` file instead (any input containing ``global``), the Godot
version is read from the .NET SDK pin in that file:

.. code-block:: json

    {"msbuild-sdks": {"Godot.NET.Sdk": "4.2.1"}}
"""

import json
import logging
from pathlib import Path
from typing import Union

from godotsetup.core.exceptions import VersionSourceError

logger = logging.getLogger(__name__)

GODOT_SDK_NAME = "Godot.NET.Sdk"


def is_global_json_reference(version: str) -> bool:
    """Check whether a version input refers to a global.json file."""
    return "global" in version.lower()


def read_global_json_version(global_json_path: Path) -> str:
    """
    Read the Godot version pinned in a global.json file.

    Args:
        global_json_path: Path to global.json

    Returns:
        Version string of the Godot.NET.Sdk entry

    Raises:
        VersionSourceError: If the file is missing, malformed or has no pin
    """
    logger.info(f"🌐 global.json file path: {global_json_path}")
    if not global_json_path.is_file():
        raise VersionSourceError(
            f"Cannot find global.json file to infer the Godot version from: "
            f"{global_json_path}"
        )

    contents = global_json_path.read_text(encoding="utf-8")
    logger.debug(f"🖨 global.json contents: {contents}")

    try:
        data = json.loads(contents) or {}
    except json.JSONDecodeError as e:
        raise VersionSourceError(f"Invalid JSON in {global_json_path}: {e}") from e

    sdks = data.get("msbuild-sdks") if isinstance(data, dict) else None
    version = sdks.get(GODOT_SDK_NAME) if isinstance(sdks, dict) else None
    if not version or not isinstance(version, str):
        raise VersionSourceError(
            f"No '{GODOT_SDK_NAME}' entry under 'msbuild-sdks' in {global_json_path}"
        )

    return version.strip()


def resolve_version_input(version: str, checkout_dir: Union[str, Path]) -> str:
    """
    Turn a version input into a literal version string.

    Args:
        version: Literal version, or a global.json path relative to checkout_dir
        checkout_dir: Repository checkout directory

    Returns:
        Literal version string (not yet validated)

    Raises:
        VersionSourceError: If a referenced global.json cannot be used
    """
    if not is_global_json_reference(version):
        return version

    logger.info("📢 Inferring Godot version from global.json file.")
    resolved = read_global_json_version(Path(checkout_dir) / version)
    logger.info(f"🤖 Godot version from global.json: {resolved}")
    return resolved
