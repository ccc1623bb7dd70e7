# byteinvoice/services/storage_service.py

import logging
import os
from io import BytesIO
from typing import Iterable, Optional

from minio import Minio
from minio.error import S3Error

from byteinvoice.config import (
    BACKUP_BUCKET,
    DATA_BUCKET,
    LOCAL_DATA_DIR,
    MINIO_ACCESS_KEY,
    MINIO_ENDPOINT,
    MINIO_SECRET_KEY,
    MINIO_SECURE,
    PDF_BUCKET,
    STORAGE_BACKEND,
)

logger = logging.getLogger(__name__)

DEFAULT_BUCKETS = (DATA_BUCKET, PDF_BUCKET, BACKUP_BUCKET)


class MinIOStorageService:
    """
    Service class for interacting with MinIO (S3-compatible) storage.
    Handles uploading, downloading, and checking existence of objects in specified buckets.
    """
    def __init__(self, client: Optional[Minio] = None, buckets: Iterable[str] = DEFAULT_BUCKETS):
        """
        Initializes the MinIO client.
        Ensures the necessary buckets exist on startup.
        """
        try:
            self.client = client or Minio(
                endpoint=MINIO_ENDPOINT,
                access_key=MINIO_ACCESS_KEY,
                secret_key=MINIO_SECRET_KEY,
                secure=MINIO_SECURE,
            )
            logger.info("MinIO client initialized for endpoint: %s, Secure: %s", MINIO_ENDPOINT, MINIO_SECURE)
            self._ensure_buckets_exist(buckets)
        except Exception as e:
            logger.error("Failed to initialize MinIO client: %s", e)
            raise

    def _ensure_buckets_exist(self, buckets: Iterable[str]) -> None:
        """
        Ensures that the data, PDF and backup buckets exist. Creates them if they don't.
        """
        for bucket_name in buckets:
            try:
                if not self.client.bucket_exists(bucket_name):
                    self.client.make_bucket(bucket_name)
                    logger.info("MinIO bucket '%s' created successfully.", bucket_name)
                else:
                    logger.debug("MinIO bucket '%s' already exists.", bucket_name)
            except S3Error as e:
                logger.error("S3 Error ensuring bucket '%s': %s", bucket_name, e)
                raise

    def upload_file(self, bucket_name: str, object_name: str, data: BytesIO, length: int, content_type: str = "application/octet-stream") -> str:
        """
        Uploads a file (BytesIO object) to a specified MinIO bucket.

        Args:
            bucket_name (str): The name of the bucket.
            object_name (str): The desired name of the object in the bucket.
            data (BytesIO): The file data as a BytesIO object.
            length (int): The length of the data in bytes.
            content_type (str): The MIME type of the file.

        Returns:
            str: The full path of the uploaded object (bucket_name/object_name).
        """
        try:
            self.client.put_object(
                bucket_name=bucket_name,
                object_name=object_name,
                data=data,
                length=length,
                content_type=content_type
            )
            logger.info("Uploaded %s to bucket %s", object_name, bucket_name)
            return f"{bucket_name}/{object_name}"
        except S3Error as e:
            logger.error("S3 Error uploading %s to %s: %s", object_name, bucket_name, e)
            raise

    def download_file(self, bucket_name: str, object_name: str) -> BytesIO:
        """
        Downloads a file from a specified MinIO bucket.

        Raises:
            FileNotFoundError: If the object does not exist.
        """
        try:
            response = self.client.get_object(bucket_name, object_name)
            try:
                file_data = BytesIO(response.read())
            finally:
                response.close()
                response.release_conn()
            file_data.seek(0) # Reset stream position to the beginning
            logger.debug("Downloaded %s from bucket %s", object_name, bucket_name)
            return file_data
        except S3Error as e:
            if e.code == "NoSuchKey":
                raise FileNotFoundError(f"Object '{object_name}' not found in bucket '{bucket_name}'.")
            logger.error("S3 Error downloading %s from %s: %s", object_name, bucket_name, e)
            raise

    def object_exists(self, bucket_name: str, object_name: str) -> bool:
        """
        Checks if an object exists in a specified MinIO bucket.
        """
        try:
            self.client.stat_object(bucket_name, object_name)
            return True
        except S3Error as e:
            if e.code == "NoSuchKey":
                return False
            logger.error("S3 Error checking existence of %s in %s: %s", object_name, bucket_name, e)
            raise


class LocalStorageService:
    """
    Same interface as MinIOStorageService backed by a directory tree;
    every bucket is a sub-directory of `base_dir`.
    """
    def __init__(self, base_dir: str = LOCAL_DATA_DIR, buckets: Iterable[str] = DEFAULT_BUCKETS):
        self.base_dir = os.path.abspath(base_dir)
        for bucket_name in buckets:
            os.makedirs(os.path.join(self.base_dir, bucket_name), exist_ok=True)
        logger.info("Local storage initialized at %s", self.base_dir)

    def _path(self, bucket_name: str, object_name: str) -> str:
        bucket_dir = os.path.join(self.base_dir, bucket_name)
        path = os.path.abspath(os.path.join(bucket_dir, object_name))
        if not path.startswith(bucket_dir + os.sep):
            raise ValueError(f"Invalid object name '{object_name}'.")
        return path

    def upload_file(self, bucket_name: str, object_name: str, data: BytesIO, length: int, content_type: str = "application/octet-stream") -> str:
        path = self._path(bucket_name, object_name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        # Write to a temporary file first so a crash never leaves half a document behind
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "wb") as f:
            f.write(data.read(length))
        os.replace(tmp_path, path)
        logger.info("Stored %s in %s (%s)", object_name, bucket_name, content_type)
        return f"{bucket_name}/{object_name}"

    def download_file(self, bucket_name: str, object_name: str) -> BytesIO:
        path = self._path(bucket_name, object_name)
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Object '{object_name}' not found in bucket '{bucket_name}'.")
        with open(path, "rb") as f:
            return BytesIO(f.read())

    def object_exists(self, bucket_name: str, object_name: str) -> bool:
        return os.path.isfile(self._path(bucket_name, object_name))


_storage_service = None


def get_storage_service():
    """
    Returns the process-wide storage service selected by STORAGE_BACKEND,
    creating it on first use.
    """
    global _storage_service
    if _storage_service is None:
        if STORAGE_BACKEND == "minio":
            _storage_service = MinIOStorageService()
        elif STORAGE_BACKEND == "local":
            _storage_service = LocalStorageService()
        else:
            raise ValueError(f"Unknown STORAGE_BACKEND '{STORAGE_BACKEND}', expected 'local' or 'minio'.")
    return _storage_service
