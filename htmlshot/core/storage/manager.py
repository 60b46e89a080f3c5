"""
Storage Manager
===============

Named local storage disks. Each disk is a root directory; paths given to the
manager are relative to that root and may not escape it.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles
import aiofiles.os

from htmlshot.config.logging import get_logger
from htmlshot.config.settings import get_settings

logger = get_logger(__name__)


class StorageError(Exception):
    """Exception raised for storage misconfiguration."""

    pass


class StorageManager:
    """Writes files to named local disks."""

    def __init__(self, disks: Optional[Dict[str, Path]] = None, default_disk: Optional[str] = None):
        self.settings = get_settings()
        self.disks: Dict[str, Path] = {
            name: Path(root) for name, root in (disks or self.settings.disks).items()
        }
        self.default_disk = default_disk or self.settings.default_disk
        self.logger: Any = logger.bind(component="storage")  # structlog.BoundLoggerBase

    def disk_root(self, disk: Optional[str] = None) -> Path:
        """
        Root directory of a disk.

        Raises:
            StorageError: If the disk is not configured
        """
        name = disk or self.default_disk
        if name not in self.disks:
            raise StorageError(f"Storage disk [{name}] is not configured")
        return self.disks[name]

    def path(self, path: str, disk: Optional[str] = None) -> Path:
        """
        Absolute filesystem path for ``path`` on ``disk``.

        Raises:
            StorageError: If the disk is unknown or the path leaves the disk root
        """
        root = self.disk_root(disk).resolve()
        target = (root / path.lstrip("/")).resolve()
        if target != root and root not in target.parents:
            raise StorageError(f"Path escapes storage disk root: {path}")
        return target

    async def put(self, path: str, content: bytes, disk: Optional[str] = None) -> bool:
        """
        Write ``content`` to ``path`` on ``disk``.

        Args:
            path: Path relative to the disk root
            content: Bytes to write
            disk: Disk name, the default disk when omitted

        Returns:
            True when the file was written, False on a write failure or an
            invalid path

        Raises:
            StorageError: If the disk is not configured
        """
        disk_name = disk or self.default_disk
        root = self.disk_root(disk_name)

        try:
            target = self.path(path, disk_name)
        except StorageError as e:
            self.logger.warning("Rejected storage path", disk=disk_name, path=path, error=str(e))
            return False

        try:
            await aiofiles.os.makedirs(target.parent, exist_ok=True)
            async with aiofiles.open(target, "wb") as f:
                await f.write(content)
        except OSError as e:
            self.logger.error(
                "Storage write failed", disk=disk_name, root=str(root), path=path, error=str(e)
            )
            return False

        self.logger.info("File stored", disk=disk_name, path=path, file_size=len(content))
        return True


# Global storage manager instance
_storage_manager: Optional[StorageManager] = None


def get_storage_manager() -> StorageManager:
    """Get the process-wide storage manager."""
    global _storage_manager
    if _storage_manager is None:
        _storage_manager = StorageManager()
    return _storage_manager


def close_storage_manager() -> None:
    """Drop the process-wide storage manager so the next call rebuilds it from settings."""
    global _storage_manager
    _storage_manager = None
