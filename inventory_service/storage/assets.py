"""Photo files kept on the content directory.

Every call goes to the filesystem; nothing about which files exist is cached
in memory.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import threading
import time
from pathlib import Path

import aiofiles
import aiofiles.os

from inventory_service.core.errors import AssetNotFound, StorageIOError


LOG = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r"^\.[a-z0-9]{1,10}$")
_MAX_NAME_ATTEMPTS = 1000


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def safe_extension(filename_hint: str | None) -> str:
    """Return the lower-cased suffix of *filename_hint*, or ``""`` if unusable."""
    if not filename_hint:
        return ""
    suffix = Path(filename_hint.replace("\\", "/")).suffix.lower()
    return suffix if _EXTENSION_RE.match(suffix) else ""


class AssetStore:
    """Stores uploaded blobs under unique, timestamp-derived filenames."""

    def __init__(self, root: Path, *, reserved: set[str] | None = None) -> None:
        self.root = Path(root)
        # Names inside root that belong to someone else (the JSON record file)
        self.reserved = set(reserved or ())
        self._lock = threading.Lock()
        self._last_stem: int = 0
        self._stem_counter: int = 0

    def ensure_root(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageIOError(f"cannot create content directory {self.root}: {exc}") from exc

    def _candidate_names(self, ext: str):
        """Yield names whose stem is the current millisecond, then counter-suffixed ones."""
        with self._lock:
            stem = _now_ms()
            if stem <= self._last_stem:
                stem = self._last_stem
                self._stem_counter += 1
            else:
                self._last_stem = stem
                self._stem_counter = 0
            counter = self._stem_counter
        if counter == 0:
            yield f"{stem}{ext}"
        for n in range(max(counter, 1), _MAX_NAME_ATTEMPTS):
            yield f"{stem}-{n}{ext}"

    async def store(self, content: bytes, filename_hint: str | None = None) -> str:
        """Persist *content* under a fresh name and return that name."""
        ext = safe_extension(filename_hint)
        for name in self._candidate_names(ext):
            path = self.root / name
            try:
                # "x" mode: an existing file is never overwritten
                async with aiofiles.open(path, mode="xb") as handle:
                    await handle.write(content)
                    await handle.flush()
                    await asyncio.to_thread(os.fsync, handle.fileno())
            except FileExistsError:
                continue
            except OSError as exc:
                await self._discard_partial(path)
                raise StorageIOError(f"cannot write asset {name}: {exc}") from exc
            LOG.info("asset stored ref=%s bytes=%d", name, len(content))
            return name
        raise StorageIOError(f"no free asset name for extension {ext!r}")

    async def _discard_partial(self, path: Path) -> None:
        # A failed write (e.g. disk full) can leave a truncated file behind
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            LOG.warning("could not remove partial asset path=%s err=%s", path, exc)

    def _path_for(self, ref: str) -> Path | None:
        if not ref or ref in (".", "..") or ref in self.reserved:
            return None
        if "/" in ref or "\\" in ref or "\x00" in ref:
            return None
        return self.root / ref

    async def resolve(self, ref: str) -> Path:
        """Return the absolute path of the stored blob *ref*."""
        path = self._path_for(ref)
        if path is None or not await aiofiles.os.path.isfile(path):
            raise AssetNotFound(ref)
        return path.resolve()

    async def exists(self, ref: str) -> bool:
        try:
            await self.resolve(ref)
        except AssetNotFound:
            return False
        return True

    async def release(self, ref: str) -> None:
        """Delete the blob *ref*; a missing blob is not an error."""
        path = self._path_for(ref)
        if path is None:
            LOG.warning("refusing to release invalid asset ref=%r", ref)
            return
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            LOG.debug("asset already absent ref=%s", ref)
            return
        except OSError as exc:
            raise StorageIOError(f"cannot delete asset {ref}: {exc}") from exc
        LOG.info("asset released ref=%s", ref)

    async def list_refs(self) -> list[str]:
        """Names of all stored blobs, sorted."""
        try:
            names = await aiofiles.os.listdir(self.root)
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StorageIOError(f"cannot list content directory {self.root}: {exc}") from exc
        refs = []
        for name in names:
            if name in self.reserved:
                continue
            if await aiofiles.os.path.isfile(self.root / name):
                refs.append(name)
        return sorted(refs)
