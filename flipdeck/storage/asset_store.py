"""Asset Store — bucketed object storage on a local filesystem root.

Objects are addressed by ``(bucket, path)`` where ``path`` is relative and
namespaced by the owning user id, e.g. ``pdfs/<user_id>/<uuid>.pdf``.
Public URLs are ``{storage_public_url}/{bucket}/{path}``.
"""

import asyncio
import logging
from pathlib import Path, PurePosixPath

from flipdeck.config import settings

logger = logging.getLogger(__name__)

BUCKETS = ("pdfs", "thumbnails", "backgrounds", "logos")


class StorageError(Exception):
    """Upload, lookup or delete failure in the Asset Store."""


class AssetStore:
    """Filesystem-backed buckets with public URL resolution."""

    def __init__(self, root: Path, public_base_url: str) -> None:
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, bucket: str, path: str) -> Path:
        if bucket not in BUCKETS:
            raise StorageError(f"Bucket not found: {bucket}")
        relative = PurePosixPath(path)
        if not path or relative.is_absolute() or ".." in relative.parts:
            raise StorageError(f"Invalid object path: {path!r}")
        return self.root / bucket / Path(*relative.parts)

    def get_public_url(self, bucket: str, path: str) -> str:
        self._resolve(bucket, path)
        return f"{self.public_base_url}/{bucket}/{path}"

    def local_path(self, bucket: str, path: str) -> Path:
        """Filesystem location of an existing object."""
        target = self._resolve(bucket, path)
        if not target.is_file():
            raise StorageError(f"Object not found: {bucket}/{path}")
        return target

    async def upload(self, bucket: str, path: str, data: bytes) -> str:
        """Store ``data`` under ``bucket/path``. Existing objects are not overwritten."""
        target = self._resolve(bucket, path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "xb") as fh:
                fh.write(data)

        try:
            await asyncio.to_thread(_write)
        except FileExistsError:
            raise StorageError("The resource already exists") from None
        except OSError as e:
            logger.error("Upload to %s/%s failed: %s", bucket, path, e)
            raise StorageError(f"Upload failed: {e.strerror or e}") from e

        logger.info("Stored %d bytes at %s/%s", len(data), bucket, path)
        return path

    async def delete(self, bucket: str, paths: list[str]) -> list[str]:
        """Remove objects; returns the paths that actually existed."""
        targets = [(p, self._resolve(bucket, p)) for p in paths]

        def _remove() -> list[str]:
            removed = []
            for path, target in targets:
                if target.is_file():
                    target.unlink()
                    removed.append(path)
            return removed

        removed = await asyncio.to_thread(_remove)
        logger.info("Deleted %d object(s) from %s", len(removed), bucket)
        return removed


def get_asset_store() -> AssetStore:
    """FastAPI dependency returning the configured store."""
    return AssetStore(settings.storage_root, settings.storage_public_url)
