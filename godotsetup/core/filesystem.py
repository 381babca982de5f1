"""
Cross-platform file system utilities for godotsetup.

This module provides the file operations the installer relies on:
- Path utilities (separator normalization, containment checks)
- Archive extraction (.zip and Godot's zip-based .tpz template bundles)
- Executable discovery in extracted trees
- Safe file operations (atomic writes, guarded deletion)

All operations handle platform differences transparently.
"""

import logging
import os
import re
import shutil
import stat
import tempfile
import zipfile
from pathlib import Path
from typing import Callable, List, Union

# Platform detection
IS_WINDOWS = os.name == "nt"

# Always reported as executable so the .NET assemblies are found.
GODOT_SHARP_DLL = "GodotSharp.dll"

logger = logging.getLogger(__name__)


# ============================================================================
# Error Handling
# ============================================================================


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def normalize_separators(path: Union[str, Path]) -> str:
    """
    Normalize a path string to forward slashes.

    Backslashes become forward slashes, repeated slashes collapse and a
    trailing slash is dropped. The path is not resolved against the disk.

    Args:
        path: Path to normalize

    Returns:
        Forward-slash path string

    Example:
        >>> normalize_separators("C:\\\\Users\\\\ci\\\\AppData\\\\Roaming\\\\Godot")
        'C:/Users/ci/AppData/Roaming/Godot'
    """
    text = str(path).replace("\\", "/")
    text = re.sub(r"/{2,}", "/", text)
    if len(text) > 1 and text.endswith("/"):
        text = text[:-1]
    return text


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Args:
        path: Path to check
        parent: Parent directory

    Returns:
        True if path is under parent directory
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
) -> Path:
    """
    Extract a Godot archive to a destination directory.

    Supported formats:
    - .zip (engine builds)
    - .tpz (export template bundles, zip-compressed)

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to

    Returns:
        The destination directory

    Raises:
        UnsupportedArchiveFormat: If archive format is not recognized
        ArchiveExtractionError: If extraction fails
        InsecureArchiveError: If archive contains malicious paths

    Example:
        >>> extract_archive('Godot_v4.2-stable_linux.x86_64.zip', '/home/ci/godot')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    archive_name = archive_path.name.lower()
    if not archive_name.endswith((".zip", ".tpz")):
        raise UnsupportedArchiveFormat(
            f"Unsupported archive format: {archive_path.suffix}. "
            "Supported: .zip, .tpz"
        )

    destination.mkdir(parents=True, exist_ok=True)

    try:
        _extract_zip(archive_path, destination)
    except InsecureArchiveError:
        raise
    except Exception as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e

    return destination


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive, restoring Unix permission bits."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.infolist()

        # Validate all paths first
        for member in members:
            _validate_archive_path(member.filename, destination)

        for member in members:
            extracted = Path(zf.extract(member, destination))

            # zipfile drops the mode bits; Godot binaries need +x
            mode = (member.external_attr >> 16) & 0o777
            if mode and not IS_WINDOWS and not member.is_dir():
                os.chmod(extracted, mode)


# ============================================================================
# Executable Discovery
# ============================================================================


def is_executable_file(path: Path, windows: bool = IS_WINDOWS) -> bool:
    """
    Check if a file should be treated as an executable.

    GodotSharp.dll is always considered executable. On Windows the '.exe'
    extension decides, elsewhere the execute permission bit.

    Args:
        path: File to check
        windows: Apply the Windows extension rule instead of permission bits

    Returns:
        True if the file is executable
    """
    if path.name == GODOT_SHARP_DLL:
        return True
    if windows:
        return path.name.lower().endswith(".exe")
    return os.access(path, os.X_OK)


def find_executables(
    directory: Union[str, Path],
    is_executable: Callable[[Path], bool] = is_executable_file,
    indent: str = "",
) -> List[Path]:
    """
    Recursively list a directory, logging its tree, and collect executables.

    Entries are visited depth-first in name order so results are stable.

    Args:
        directory: Directory to walk
        is_executable: Predicate deciding whether a file is executable
        indent: Indentation prefix for the logged tree

    Returns:
        Paths of executable files

    Raises:
        FileNotFoundError: If the directory does not exist
    """
    directory = Path(directory)
    logger.info(f"{indent}📁 {directory}")

    executables: List[Path] = []
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.is_dir() and not entry.is_symlink():
            executables.extend(find_executables(entry, is_executable, f"{indent}  "))
        elif is_executable(entry):
            logger.info(f"{indent}  🚀 {entry.name}")
            executables.append(entry)
        else:
            logger.info(f"{indent}  📄 {entry.name}")
    return executables


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)

    Example:
        >>> atomic_write('index.json', '{"entries": {}}')
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Create temp file in same directory (ensures same filesystem)
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise


def safe_rmtree(path: Union[str, Path]) -> None:
    """
    Remove a directory tree, clearing read-only flags that block deletion.

    A symlink is unlinked without touching its target.

    Args:
        path: Directory to remove

    Raises:
        FilesystemError: If deletion fails

    Example:
        >>> safe_rmtree('/home/ci/godot')
    """
    path = Path(path).absolute()

    if path.is_symlink():
        path.unlink()
        return

    if not path.exists():
        return  # Already gone, nothing to do

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    def handle_remove_readonly(func, failed_path, exc):
        """Error handler for read-only files (Windows)."""
        if not os.access(failed_path, os.W_OK):
            os.chmod(failed_path, stat.S_IWRITE)
            func(failed_path)
        else:
            raise

    try:
        if IS_WINDOWS:
            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)
    except Exception as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def remove_path(path: Union[str, Path]) -> None:
    """
    Remove a file, link or directory tree if it exists.

    Args:
        path: Path to remove
    """
    path = Path(path)
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        safe_rmtree(path)


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists (idempotent).

    Args:
        path: Directory path

    Returns:
        The directory path
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path
