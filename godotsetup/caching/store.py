"""
Persistent artifact cache keyed by opaque cache keys.

The cache keeps extracted Godot installations (and export templates) between
CI jobs that share a runner. Each entry is a ``tar.gz`` archive of the saved
paths plus a record in ``index.json``:

    {cache_dir}/
        index.json          : key -> archive name, saved paths, timestamp
        lock/index.lock     : file lock guarding index updates
        <sha256(key)>.tar.gz

Restoring only succeeds when the requested path list is the same list the
entry was saved with.
"""

import hashlib
import json
import logging
import shutil
import sys
import tarfile
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Union

from filelock import FileLock, Timeout

from godotsetup.core.exceptions import CacheError
from godotsetup.core.filesystem import atomic_write, remove_path

logger = logging.getLogger(__name__)

INDEX_VERSION = 1

PathLike = Union[str, Path]


def get_default_cache_dir() -> Path:
    """
    Get the default cache directory.

    Returns:
        ~/.godotsetup/cache on every platform
    """
    return Path.home() / ".godotsetup" / "cache"


def cache_archive_name(key: str) -> str:
    """File name of the archive stored for a cache key."""
    return hashlib.sha256(key.encode("utf-8")).hexdigest() + ".tar.gz"


class ArtifactCache:
    """
    Saves and restores directory trees under a cache key.

    Example:
        >>> cache = ArtifactCache(Path("/home/ci/.godotsetup/cache"))
        >>> paths = [Path("/home/ci/godot/Godot_v4.2-stable_linux.x86_64")]
        >>> key = "https://github.com/.../Godot_v4.2-stable_linux.x86_64.zip"
        >>> if not cache.restore(paths, key):
        ...     install()
        ...     cache.save(paths, key)
    """

    def __init__(self, cache_dir: Optional[Path] = None, lock_timeout: int = 60):
        """
        Initialize artifact cache.

        Args:
            cache_dir: Cache directory (default: ~/.godotsetup/cache)
            lock_timeout: Timeout in seconds for acquiring the index lock
        """
        self.cache_dir = Path(cache_dir) if cache_dir else get_default_cache_dir()
        self.index_path = self.cache_dir / "index.json"
        self.lock_path = self.cache_dir / "lock" / "index.lock"
        self.lock_timeout = lock_timeout

        logger.debug(f"Initialized artifact cache at {self.cache_dir}")

    # ------------------------------------------------------------------
    # Index handling
    # ------------------------------------------------------------------

    def _load_index(self) -> dict:
        """Load the index from disk, returning an empty one if absent."""
        if not self.index_path.exists():
            return {"version": INDEX_VERSION, "entries": {}}

        try:
            with open(self.index_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise CacheError(f"Failed to load cache index: {e}") from e

        if not isinstance(data, dict) or "entries" not in data:
            logger.warning("Invalid cache index format, resetting")
            return {"version": INDEX_VERSION, "entries": {}}

        return data

    def _save_index(self, data: dict) -> None:
        try:
            content = json.dumps(data, indent=2, ensure_ascii=False)
            atomic_write(self.index_path, content)
        except OSError as e:
            raise CacheError(f"Failed to save cache index: {e}") from e

    @contextmanager
    def _lock(self):
        """
        Context manager for index locking.

        Raises:
            CacheError: If lock cannot be acquired within timeout
        """
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        lock = FileLock(self.lock_path, timeout=self.lock_timeout)

        try:
            with lock:
                yield
        except Timeout as e:
            raise CacheError(
                f"Could not acquire cache lock within {self.lock_timeout} seconds"
            ) from e

    @staticmethod
    def _path_list(paths: Sequence[PathLike]) -> List[str]:
        return [str(Path(p).absolute()) for p in paths]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def save(self, paths: Sequence[PathLike], key: str) -> Path:
        """
        Archive the given paths under a cache key.

        An existing entry for the same key is replaced.

        Args:
            paths: Files or directories to save
            key: Cache key

        Returns:
            Path to the written archive

        Raises:
            CacheError: If a path is missing or the archive cannot be written
        """
        saved_paths = self._path_list(paths)
        for path in saved_paths:
            if not Path(path).exists():
                raise CacheError(f"Cannot cache missing path: {path}")

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        archive_path = self.cache_dir / cache_archive_name(key)
        temp_path = archive_path.with_name(archive_path.name + ".tmp")

        try:
            with tarfile.open(temp_path, "w:gz") as tar:
                for index, path in enumerate(saved_paths):
                    tar.add(path, arcname=str(index))
            temp_path.replace(archive_path)
        except (OSError, tarfile.TarError) as e:
            temp_path.unlink(missing_ok=True)
            raise CacheError(f"Failed to write cache archive: {e}") from e

        with self._lock():
            data = self._load_index()
            data["entries"][key] = {
                "archive": archive_path.name,
                "paths": saved_paths,
                "saved": datetime.now().isoformat(),
            }
            self._save_index(data)

        logger.info(f"Saved {len(saved_paths)} path(s) to cache: {archive_path.name}")
        return archive_path

    def restore(self, paths: Sequence[PathLike], key: str) -> bool:
        """
        Restore the given paths from a cache key.

        Args:
            paths: Files or directories to restore (must match the saved list)
            key: Cache key

        Returns:
            True on a cache hit, False on a miss

        Raises:
            CacheError: If the archive exists but cannot be read
        """
        requested = self._path_list(paths)

        with self._lock():
            entry = self._load_index()["entries"].get(key)

        if entry is None:
            logger.debug(f"Cache miss: {key}")
            return False

        if entry.get("paths") != requested:
            logger.warning(
                f"Cache entry for {key} was saved with different paths, ignoring it"
            )
            return False

        archive_path = self.cache_dir / entry["archive"]
        if not archive_path.exists():
            logger.warning(f"Cache archive missing: {archive_path}")
            return False

        with tempfile.TemporaryDirectory(dir=self.cache_dir, prefix="restore_") as tmp:
            staging = Path(tmp)
            try:
                with tarfile.open(archive_path, "r:gz") as tar:
                    if sys.version_info >= (3, 12):
                        tar.extractall(staging, filter="data")
                    else:
                        tar.extractall(staging)
            except (OSError, tarfile.TarError) as e:
                raise CacheError(
                    f"Failed to read cache archive {archive_path}: {e}"
                ) from e

            for index, path in enumerate(requested):
                target = Path(path)
                remove_path(target)
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.move(str(staging / str(index)), str(target))

        logger.info(f"Restored {len(requested)} path(s) from cache")
        return True
