"""
Process environment export for CI jobs.

Variables and PATH entries are applied to the current process and, when
running under GitHub Actions, appended to the files named by ``GITHUB_ENV``
and ``GITHUB_PATH`` so later job steps see them too.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import MutableMapping, Optional, Union

logger = logging.getLogger(__name__)


class EnvironmentExporter:
    """
    Exports variables and PATH entries to the running CI job.

    Example:
        >>> exporter = EnvironmentExporter()
        >>> exporter.export_variable("GODOT", "/home/ci/godot_bin/godot")
        >>> exporter.add_path("/home/ci/godot_bin")
    """

    def __init__(self, environ: Optional[MutableMapping[str, str]] = None):
        """
        Initialize exporter.

        Args:
            environ: Environment mapping to update (default: os.environ)
        """
        self.environ = os.environ if environ is None else environ

    def export_variable(self, name: str, value: Union[str, Path]) -> None:
        """
        Export an environment variable to this process and later job steps.

        Args:
            name: Variable name
            value: Variable value
        """
        value = str(value)
        self.environ[name] = value

        env_file = self.environ.get("GITHUB_ENV")
        if env_file:
            if "\n" in value:
                delimiter = f"ghadelimiter_{uuid.uuid4()}"
                line = f"{name}<<{delimiter}\n{value}\n{delimiter}\n"
            else:
                line = f"{name}={value}\n"
            _append(Path(env_file), line)

        logger.debug(f"Exported {name}={value}")

    def add_path(self, directory: Union[str, Path]) -> None:
        """
        Prepend a directory to PATH for this process and later job steps.

        Args:
            directory: Directory to add
        """
        directory = str(directory)
        current = self.environ.get("PATH", "")
        self.environ["PATH"] = (
            directory + os.pathsep + current if current else directory
        )

        path_file = self.environ.get("GITHUB_PATH")
        if path_file:
            _append(Path(path_file), f"{directory}\n")

        logger.debug(f"Added to PATH: {directory}")


def _append(file_path: Path, text: str) -> None:
    with open(file_path, "a", encoding="utf-8") as f:
        f.write(text)
