"""Filesystem implementation of ObjectStoragePort for development."""

import hashlib
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

from ...domain.storage.ports import ObjectStoragePort, StorageError, StoredFile

logger = logging.getLogger(__name__)


class LocalFileStorage(ObjectStoragePort):
    """Stores files below a root directory using the same key layout as S3."""

    def __init__(self, root_dir: str):
        self.root = Path(root_dir)

    def _path(self, storage_key: str) -> Path:
        path = (self.root / storage_key).resolve()
        if self.root.resolve() not in path.parents:
            raise StorageError(f"Storage key escapes storage root: {storage_key}")
        return path

    def store_file(
        self,
        file: BinaryIO,
        prefix: str,
        filename: str,
        mime_type: str,
    ) -> StoredFile:
        content = file.read()
        if not content:
            raise ValueError("Cannot store empty file")

        sha256_hex = hashlib.sha256(content).hexdigest()
        now = datetime.now(timezone.utc)
        ext = Path(filename).suffix or ""
        storage_key = f"{prefix.strip('/')}/{now.year}/{now.month:02d}/{sha256_hex}{ext}"

        path = self._path(storage_key)
        if not path.exists():
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(content)
            except OSError as e:
                logger.error(f"Local store failed: storage_key={storage_key}, error={e}")
                raise StorageError(f"Failed to store file: {e}")
            logger.info(f"Stored file: storage_key={storage_key}, size={len(content)}")

        return StoredFile(
            storage_key=storage_key,
            sha256=sha256_hex,
            size_bytes=len(content),
            mime_type=mime_type,
        )

    def retrieve_file(self, storage_key: str) -> bytes:
        path = self._path(storage_key)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {storage_key}")
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to retrieve file: {e}")

    def delete_file(self, storage_key: str) -> bool:
        path = self._path(storage_key)
        if not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete file: {e}")
        logger.info(f"Deleted file: storage_key={storage_key}")
        return True

    def file_exists(self, storage_key: str) -> bool:
        return self._path(storage_key).is_file()

    def verify_available(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Storage directory unusable: {e}")
