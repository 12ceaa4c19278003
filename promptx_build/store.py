"""Directory-scoped storage for generated artifacts.

A ``CacheStore`` is bound to exactly one cache directory (normally
``<sourceDir>/.cache``) and is passed into the pipeline explicitly. Writes go
through a temporary dotfile in the same directory followed by ``os.replace``
so readers only ever see complete artifacts.
"""
from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from .cache import owns_artifact
from .errors import StorageError
from .schema import CacheEntry

logger = logging.getLogger(__name__)


def _file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class CacheStore:
    """Read/write/list/delete operations for one cache directory."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)

    def __repr__(self) -> str:
        return f"CacheStore({str(self.directory)!r})"

    async def ensure_directory(self) -> Path:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create cache directory {self.directory}: {e}") from e
        return self.directory

    async def lookup(self, path: Union[str, Path]) -> Optional[str]:
        """Return the stored artifact text, or ``None`` on a miss."""
        try:
            return Path(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Cannot read cache artifact {path}: {e}") from e

    async def write(self, path: Union[str, Path], content: str) -> Path:
        target = Path(path)
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=".tmp-", suffix=".part", dir=target.parent)
        except OSError as e:
            raise StorageError(f"Cannot write cache artifact {target}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            # mkstemp creates 0600; artifacts get the usual umask-derived mode
            os.chmod(tmp_name, _file_mode())
            os.replace(tmp_name, target)
        except BaseException as e:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            if isinstance(e, (OSError, ValueError)):
                raise StorageError(f"Cannot write cache artifact {target}: {e}") from e
            raise
        return target

    async def evict_stale(self, source_name: str, keep: Union[str, Path]) -> List[Path]:
        """Delete every artifact of ``source_name`` except ``keep``.

        Best effort: listing or deletion failures are logged and skipped.
        Returns the paths that were actually removed.
        """
        keep_name = Path(keep).name
        try:
            names = sorted(os.listdir(self.directory))
        except OSError as e:
            logger.warning("Cannot list cache directory %s: %s", self.directory, e)
            return []

        evicted: List[Path] = []
        for name in names:
            if name == keep_name or not owns_artifact(name, source_name):
                continue
            stale = self.directory / name
            try:
                stale.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("Failed to evict stale artifact %s: %s", stale, e)
                continue
            logger.info("Evicted stale artifact %s", stale)
            evicted.append(stale)
        return evicted

    async def list_entries(self, source_name: Optional[str] = None) -> List[CacheEntry]:
        entries: List[CacheEntry] = []
        if not self.directory.is_dir():
            return entries
        for path in sorted(self.directory.iterdir()):
            if not path.is_file() or path.name.startswith("."):
                continue
            digest, sep, rest = path.name.partition("-")
            if not sep:
                continue
            if source_name is not None and not owns_artifact(path.name, source_name):
                continue
            stem = rest.rsplit(".", 1)[0] if "." in rest else rest
            try:
                content = path.read_text(encoding="utf-8")
                mtime = path.stat().st_mtime
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping unreadable cache entry %s: %s", path, e)
                continue
            entries.append(CacheEntry(
                path=str(path),
                checksum=digest,
                source_name=source_name or stem,
                content=content,
                created_at=datetime.fromtimestamp(mtime, tz=timezone.utc),
            ))
        return entries


__all__ = ["CacheStore"]
