"""Blob storage for generated documents."""

from __future__ import annotations

from pathlib import Path


class BlobStore:
    """Stores bytes under a relative path and returns a public URL."""

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        raise NotImplementedError


class LocalBlobStore(BlobStore):
    """Writes blobs under ``root_dir``; they are served from ``base_url``."""

    def __init__(self, root_dir: str | Path, base_url: str = "/generated-docs"):
        self.root_dir = Path(root_dir)
        self.base_url = base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        target = (self.root_dir / path).resolve()
        if not target.is_relative_to(self.root_dir.resolve()):
            raise ValueError(f"Blob path escapes the store: {path}")
        return target

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_suffix(target.suffix + ".part")
        tmp.write_bytes(data)
        tmp.replace(target)
        return f"{self.base_url}/{path.lstrip('/')}"
