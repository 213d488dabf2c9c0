"""Object Storage Port - Domain interface for certificate and photo files.

This port defines the contract for storing and retrieving files in object
storage. Adapters implement it for S3/MinIO or the local filesystem.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO

from ...errors import DependencyFailure


class StorageError(DependencyFailure):
    """Base exception for storage operations."""
    pass


@dataclass
class StoredFile:
    """Metadata for a file stored in object storage.

    Attributes:
        storage_key: Unique key in object storage (format: {prefix}/{year}/{month}/{sha256}.{ext})
        sha256: SHA256 hash of file content (hex format)
        size_bytes: File size in bytes
        mime_type: MIME type of the file (e.g., 'application/pdf')
    """
    storage_key: str
    sha256: str
    size_bytes: int
    mime_type: str


class ObjectStoragePort(ABC):
    """Port interface for object storage operations.

    Key Design Principles:
    - Storage keys are grouped by prefix ("certificates", "photos/<door_id>")
    - SHA256 calculated during upload for deduplication and integrity
    - Idempotent operations (store_file returns existing if duplicate)
    """

    @abstractmethod
    def store_file(
        self,
        file: BinaryIO,
        prefix: str,
        filename: str,
        mime_type: str,
    ) -> StoredFile:
        """Store a file, deduplicating on content hash.

        Raises:
            StorageError: If upload fails or storage is unavailable
            ValueError: If file is empty
        """
        pass

    @abstractmethod
    def retrieve_file(self, storage_key: str) -> bytes:
        """Retrieve file content by storage key.

        Raises:
            FileNotFoundError: If file doesn't exist in storage
            StorageError: If retrieval fails
        """
        pass

    @abstractmethod
    def delete_file(self, storage_key: str) -> bool:
        """Delete a file. Returns False if it didn't exist."""
        pass

    @abstractmethod
    def file_exists(self, storage_key: str) -> bool:
        pass

    @abstractmethod
    def verify_available(self) -> None:
        """Fail fast if the backing bucket or directory is unusable.

        Raises:
            StorageError: If storage cannot be used
        """
        pass
