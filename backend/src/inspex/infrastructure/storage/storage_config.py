"""Storage configuration for certificate and photo files.

Supports MinIO (development), AWS S3 (production) and a plain directory
(local runs without MinIO) behind the same port.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from ...config import Settings, get_settings
from ...domain.storage.ports import ObjectStoragePort
from .local_storage_adapter import LocalFileStorage
from .s3_storage_adapter import S3StorageAdapter


@dataclass
class StorageConfig:
    """Configuration for S3-compatible object storage.

    Attributes:
        endpoint_url: S3 endpoint URL ('http://localhost:9000' for MinIO,
                      None for AWS S3 default regional endpoints)
        access_key: S3 access key ID
        secret_key: S3 secret access key
        bucket_name: Bucket holding certificates and photos
        region: AWS region (default: 'us-east-1')
    """
    endpoint_url: Optional[str]
    access_key: str
    secret_key: str
    bucket_name: str
    region: str = "us-east-1"


def load_storage_config(settings: Settings) -> StorageConfig:
    """Build S3 configuration from settings.

    Raises:
        ValueError: If credentials or bucket are missing
    """
    if not settings.S3_ACCESS_KEY_ID or not settings.S3_SECRET_ACCESS_KEY:
        raise ValueError(
            "Missing required storage credentials. "
            "Set S3_ACCESS_KEY_ID and S3_SECRET_ACCESS_KEY environment variables."
        )
    if not settings.S3_BUCKET_NAME:
        raise ValueError("S3_BUCKET_NAME is required")

    endpoint_url = settings.S3_ENDPOINT_URL or None
    if endpoint_url and not endpoint_url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid S3_ENDPOINT_URL: {endpoint_url}. "
            "Must start with http:// or https://"
        )

    return StorageConfig(
        endpoint_url=endpoint_url,
        access_key=settings.S3_ACCESS_KEY_ID,
        secret_key=settings.S3_SECRET_ACCESS_KEY,
        bucket_name=settings.S3_BUCKET_NAME,
        region=settings.S3_REGION,
    )


@lru_cache()
def get_object_storage() -> ObjectStoragePort:
    """Configured storage backend (FastAPI dependency, cached)."""
    settings = get_settings()
    if settings.STORAGE_BACKEND == "s3":
        config = load_storage_config(settings)
        return S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
        )
    return LocalFileStorage(settings.LOCAL_STORAGE_DIR)
