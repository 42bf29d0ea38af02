"""
BlobCache service - Caches CCDB objects on disk.

Single responsibility: Load/save raw object blobs with file locking.
"""

import os
import time
import logging
from typing import Optional


class BlobCache:
    """
    On-disk cache of CCDB blobs keyed by object path and timestamp.

    Writes are atomic (temp file + rename) and guarded by an exclusive
    lock file so that concurrent jobs sharing a cache directory do not
    read half-written objects.
    """

    def __init__(self, cache_dir: str, max_wait_time: int = 60):
        """
        Initialize blob cache.

        Args:
            cache_dir: Root directory of the cache
            max_wait_time: Maximum seconds to wait for a lock
        """
        self.cache_dir = cache_dir
        self.max_wait_time = max_wait_time
        self.wait_interval = 1

    def path_for(self, key: str, timestamp: int) -> str:
        """Cache file path for an object path pinned at a timestamp."""
        return os.path.join(self.cache_dir, key.strip("/"), f"{timestamp}.root")

    def load(self, key: str, timestamp: int) -> Optional[bytes]:
        """
        Load a cached blob.

        Returns:
            Blob bytes, or None if the object is not cached or unreadable
        """
        cache_path = self.path_for(key, timestamp)
        if not os.path.exists(cache_path):
            return None

        try:
            with open(cache_path, "rb") as f:
                data = f.read()
            logging.info(f"Loaded CCDB object from cache: {cache_path}")
            return data
        except IOError as e:
            logging.warning(f"Failed to load cached object {cache_path}: {e}")
            return None

    def save(self, key: str, timestamp: int, data: bytes) -> bool:
        """
        Save a blob atomically.

        Returns:
            True if the blob was written, False otherwise

        Raises:
            TimeoutError: If the lock cannot be acquired within max_wait_time
        """
        cache_path = self.path_for(key, timestamp)
        os.makedirs(os.path.dirname(cache_path), exist_ok=True)
        lock_path = f"{cache_path}.lock"

        if not self._acquire_lock(lock_path, cache_path):
            if os.path.exists(cache_path):
                return False
            raise TimeoutError(
                f"Could not acquire lock for {cache_path} "
                f"after {self.max_wait_time} seconds"
            )

        temp_path = f"{cache_path}.tmp"
        try:
            with open(temp_path, "wb") as f:
                f.write(data)
            os.replace(temp_path, cache_path)
            logging.info(f"Saved CCDB object to cache: {cache_path}")
            return True
        except OSError as e:
            logging.error(f"Failed to save cache to {cache_path}: {e}")
            if os.path.exists(temp_path):
                os.remove(temp_path)
            return False
        finally:
            self._release_lock(lock_path)

    def _acquire_lock(self, lock_path: str, cache_path: str) -> bool:
        """
        Try to acquire the lock file, waiting up to max_wait_time.

        Returns:
            True if lock acquired, False on timeout or if another
            process wrote the object meanwhile
        """
        elapsed = 0

        while elapsed < self.max_wait_time:
            try:
                lock_fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
                os.close(lock_fd)
                return True
            except FileExistsError:
                logging.debug(f"Lock file exists, waiting... (waited {elapsed}s)")
                time.sleep(self.wait_interval)
                elapsed += self.wait_interval

                if os.path.exists(cache_path):
                    logging.info("Object was cached by another process")
                    return False

        return False

    def _release_lock(self, lock_path: str):
        """Release the lock by removing the lock file."""
        if os.path.exists(lock_path):
            try:
                os.unlink(lock_path)
            except OSError as e:
                logging.warning(f"Failed to release lock: {e}")
