"""S3 Storage Adapter - Implementation of ObjectStoragePort using boto3.

Provides S3-compatible storage operations for AWS S3, MinIO, and other
S3-compatible services. Certificates and inspection photos are stored under
``{prefix}/{year}/{month}/{sha256}{ext}`` and deduplicated on content hash.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import hashlib
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from ...domain.storage.ports import ObjectStoragePort, StorageError, StoredFile

logger = logging.getLogger(__name__)


class S3StorageAdapter(ObjectStoragePort):
    """S3-compatible storage adapter using boto3.

    Example:
        config = load_storage_config(get_settings())
        storage = S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
        )

        stored = storage.store_file(
            file=BytesIO(pdf_bytes),
            prefix="certificates",
            filename="certificate-MF42-15-0001.pdf",
            mime_type="application/pdf",
        )
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
    ):
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
            self.bucket_name = bucket_name
            self.region = region

            logger.info(
                f"Initialized S3 storage adapter: bucket={bucket_name}, "
                f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
            )
        except NoCredentialsError as e:
            raise StorageError(f"Invalid S3 credentials: {e}")
        except Exception as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

    def store_file(
        self,
        file: BinaryIO,
        prefix: str,
        filename: str,
        mime_type: str,
    ) -> StoredFile:
        """Store a file in S3 with automatic deduplication.

        Raises:
            StorageError: If upload fails
            ValueError: If file is empty
        """
        content = file.read()
        if not content:
            raise ValueError("Cannot store empty file")

        sha256_hex = hashlib.sha256(content).hexdigest()
        storage_key = self._generate_storage_key(prefix, sha256_hex, filename)
        size_bytes = len(content)

        if self.file_exists(storage_key):
            logger.info(f"File already exists (dedup): storage_key={storage_key}")
            return StoredFile(
                storage_key=storage_key,
                sha256=sha256_hex,
                size_bytes=size_bytes,
                mime_type=mime_type,
            )

        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=storage_key,
                Body=content,
                ContentType=mime_type,
                Metadata={
                    "sha256": sha256_hex,
                    "original_filename": filename,
                },
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 upload failed: storage_key={storage_key}, "
                f"error={error_code}, message={e}"
            )
            raise StorageError(f"Failed to upload file: {error_code}")
        except BotoCoreError as e:
            logger.error(f"S3 upload failed: storage_key={storage_key}, error={e}")
            raise StorageError(f"Failed to upload file: {e}")

        logger.info(
            f"Uploaded file: storage_key={storage_key}, "
            f"size={size_bytes}, mime_type={mime_type}"
        )
        return StoredFile(
            storage_key=storage_key,
            sha256=sha256_hex,
            size_bytes=size_bytes,
            mime_type=mime_type,
        )

    def retrieve_file(self, storage_key: str) -> bytes:
        try:
            response = self.s3_client.get_object(
                Bucket=self.bucket_name,
                Key=storage_key,
            )
            return response["Body"].read()
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "NoSuchKey":
                logger.warning(f"File not found: storage_key={storage_key}")
                raise FileNotFoundError(f"File not found: {storage_key}")
            logger.error(
                f"S3 retrieval failed: storage_key={storage_key}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to retrieve file: {error_code}")
        except BotoCoreError as e:
            raise StorageError(f"Failed to retrieve file: {e}")

    def delete_file(self, storage_key: str) -> bool:
        if not self.file_exists(storage_key):
            logger.info(f"File not found for deletion: storage_key={storage_key}")
            return False

        try:
            self.s3_client.delete_object(
                Bucket=self.bucket_name,
                Key=storage_key,
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 deletion failed: storage_key={storage_key}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to delete file: {error_code}")
        except BotoCoreError as e:
            raise StorageError(f"Failed to delete file: {e}")

        logger.info(f"Deleted file: storage_key={storage_key}")
        return True

    def file_exists(self, storage_key: str) -> bool:
        """Check if a file exists in S3 (HEAD request)."""
        try:
            self.s3_client.head_object(
                Bucket=self.bucket_name,
                Key=storage_key,
            )
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code not in ("404", "NoSuchKey"):
                logger.warning(
                    f"Error checking file existence: storage_key={storage_key}, "
                    f"error={error_code}"
                )
            return False

    def verify_available(self) -> None:
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "404":
                raise StorageError(
                    f"Bucket '{self.bucket_name}' does not exist. "
                    f"Create it first or update S3_BUCKET_NAME."
                )
            raise StorageError(f"Failed to verify bucket: {error_code}")
        except BotoCoreError as e:
            raise StorageError(f"Failed to verify bucket: {e}")

    def _generate_storage_key(self, prefix: str, sha256: str, filename: str) -> str:
        """Generate storage key in format: {prefix}/{year}/{month}/{sha256}{ext}

        Example:
            >>> adapter._generate_storage_key("certificates", "abc123", "cert.pdf")
            'certificates/2025/01/abc123.pdf'
        """
        now = datetime.now(timezone.utc)
        ext = Path(filename).suffix or ""
        return f"{prefix.strip('/')}/{now.year}/{now.month:02d}/{sha256}{ext}"
