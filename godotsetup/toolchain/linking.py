"""
godotsetup/toolchain/linking.py

Link management for the stable bin directory.

The installed Godot executable is exposed under a fixed name
(``{bin}/godot``) through a hard link, and the .NET assemblies directory
through a directory link: a symlink on Unix-like systems and a directory
junction on Windows, where symlinks need elevated privileges.
"""

import os
import subprocess
from enum import Enum
from pathlib import Path
from typing import Optional
import logging

from godotsetup.core.filesystem import FilesystemError, safe_rmtree

logger = logging.getLogger(__name__)


class LinkType(Enum):
    """Types of filesystem links."""

    SYMLINK = "symlink"  # Symbolic link (Unix)
    JUNCTION = "junction"  # Directory junction (Windows)
    HARDLINK = "hardlink"  # Hard link (files)


class LinkCreationError(FilesystemError):
    """Failed to create a link."""

    pass


class GodotLinkManager:
    """Creates the links that expose an installed Godot in the bin directory."""

    def __init__(self, use_junctions: Optional[bool] = None):
        """
        Initialize link manager.

        Args:
            use_junctions: Use directory junctions instead of symlinks
                (default: True on Windows)
        """
        if use_junctions is None:
            use_junctions = os.name == "nt"
        self._use_junctions = use_junctions

    def reset_directory(self, directory: Path) -> Path:
        """
        Empty a directory, creating it if needed.

        Args:
            directory: Directory to reset

        Returns:
            The directory path
        """
        directory = Path(directory)
        if directory.exists() or directory.is_symlink():
            safe_rmtree(directory)
        directory.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Reset directory: {directory}")
        return directory

    def link_file(self, link_path: Path, target_path: Path) -> LinkType:
        """
        Hard link a file.

        Args:
            link_path: Path where link should be created
            target_path: Existing file the link points to

        Returns:
            LinkType.HARDLINK

        Raises:
            FileNotFoundError: If target doesn't exist
            LinkCreationError: If link creation fails
        """
        link_path = Path(link_path).absolute()
        target_path = Path(target_path).absolute()

        if not target_path.is_file():
            raise FileNotFoundError(f"Target does not exist: {target_path}")

        self._clear(link_path)
        link_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            os.link(target_path, link_path)
        except OSError as e:
            raise LinkCreationError(
                f"Failed to create hard link {link_path} -> {target_path}: {e}"
            ) from e

        logger.info(f"Created hard link: {link_path} -> {target_path}")
        return LinkType.HARDLINK

    def link_directory(self, link_path: Path, target_path: Path) -> LinkType:
        """
        Create symlink (Unix) or junction (Windows) to a directory.

        Args:
            link_path: Path where link should be created
            target_path: Existing directory the link points to

        Returns:
            Type of link created

        Raises:
            FileNotFoundError: If target doesn't exist
            LinkCreationError: If link creation fails
        """
        link_path = Path(link_path).absolute()
        target_path = Path(target_path).resolve()

        if not target_path.is_dir():
            raise FileNotFoundError(f"Target does not exist: {target_path}")

        self._clear(link_path)
        link_path.parent.mkdir(parents=True, exist_ok=True)

        if self._use_junctions:
            self._create_junction(link_path, target_path)
            return LinkType.JUNCTION

        try:
            os.symlink(target_path, link_path, target_is_directory=True)
        except OSError as e:
            raise LinkCreationError(f"Failed to create symlink: {e}") from e

        logger.info(f"Created symlink: {link_path} -> {target_path}")
        return LinkType.SYMLINK

    def _create_junction(self, link_path: Path, target_path: Path) -> None:
        """Create directory junction (Windows)."""
        try:
            import _winapi

            _winapi.CreateJunction(str(target_path), str(link_path))  # type: ignore
            logger.info(f"Created junction: {link_path} -> {target_path}")
            return
        except (ImportError, AttributeError, OSError) as e:
            logger.debug(f"_winapi.CreateJunction failed: {e}, trying mklink")

        result = subprocess.run(
            ["cmd", "/c", "mklink", "/J", str(link_path), str(target_path)],
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            raise LinkCreationError(f"Failed to create junction: {result.stderr}")

        logger.info(f"Created junction: {link_path} -> {target_path}")

    def _clear(self, link_path: Path) -> None:
        """Remove whatever currently occupies link_path."""
        if self._is_junction(link_path):
            os.rmdir(link_path)
        elif link_path.is_symlink() or link_path.is_file():
            link_path.unlink()
        elif link_path.is_dir():
            safe_rmtree(link_path)

    def _is_junction(self, path: Path) -> bool:
        """
        Check if path is a Windows directory junction.

        Args:
            path: Path to check

        Returns:
            True if path is a junction
        """
        if not self._use_junctions:
            return False

        try:
            st = os.stat(path, follow_symlinks=False)
        except (FileNotFoundError, NotADirectoryError):
            return False

        # FILE_ATTRIBUTE_REPARSE_POINT
        if hasattr(st, "st_file_attributes"):
            return bool(st.st_file_attributes & 0x400)  # type: ignore
        return False
