# tests/test_storage_service.py

from io import BytesIO
from unittest.mock import MagicMock

import pytest
from minio.error import S3Error

from byteinvoice.services.storage_service import LocalStorageService, MinIOStorageService


class _S3Error(S3Error):
    # The S3Error constructor differs between minio releases; only the code matters here
    def __init__(self, code):
        Exception.__init__(self, code)
        self._test_code = code

    @property
    def code(self):
        return self._test_code

    def __str__(self):
        return self._test_code


def _s3_error(code):
    return _S3Error(code)


def test_local_round_trip(storage):
    path = storage.upload_file("backups", "a.json", BytesIO(b"{}"), 2, "application/json")
    assert path == "backups/a.json"
    assert storage.object_exists("backups", "a.json")
    assert storage.download_file("backups", "a.json").read() == b"{}"


def test_local_missing_object(storage):
    assert not storage.object_exists("backups", "missing.json")
    with pytest.raises(FileNotFoundError):
        storage.download_file("backups", "missing.json")


def test_local_rejects_path_traversal(storage):
    with pytest.raises(ValueError):
        storage.upload_file("backups", "../../escape.txt", BytesIO(b"x"), 1)


def test_local_creates_bucket_directories(tmp_path):
    LocalStorageService(base_dir=str(tmp_path), buckets=["one", "two"])
    assert (tmp_path / "one").is_dir()
    assert (tmp_path / "two").is_dir()


def test_minio_creates_missing_buckets():
    client = MagicMock()
    client.bucket_exists.side_effect = lambda name: name == "existing"
    MinIOStorageService(client=client, buckets=["existing", "new"])
    client.make_bucket.assert_called_once_with("new")


def test_minio_upload_returns_path():
    client = MagicMock()
    service = MinIOStorageService(client=client, buckets=[])
    data = BytesIO(b"pdf")
    assert service.upload_file("generated-invoices", "invoice-1.pdf", data, 3, "application/pdf") == "generated-invoices/invoice-1.pdf"
    client.put_object.assert_called_once_with(
        bucket_name="generated-invoices",
        object_name="invoice-1.pdf",
        data=data,
        length=3,
        content_type="application/pdf",
    )


def test_minio_download_and_missing_key():
    client = MagicMock()
    client.get_object.return_value.read.return_value = b"content"
    service = MinIOStorageService(client=client, buckets=[])
    assert service.download_file("b", "o").read() == b"content"
    client.get_object.return_value.release_conn.assert_called_once()

    client.get_object.side_effect = _s3_error("NoSuchKey")
    with pytest.raises(FileNotFoundError):
        service.download_file("b", "o")


def test_minio_object_exists():
    client = MagicMock()
    service = MinIOStorageService(client=client, buckets=[])
    assert service.object_exists("b", "o")

    client.stat_object.side_effect = _s3_error("NoSuchKey")
    assert not service.object_exists("b", "o")

    client.stat_object.side_effect = _s3_error("AccessDenied")
    with pytest.raises(S3Error):
        service.object_exists("b", "o")
