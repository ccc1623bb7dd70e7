# byteinvoice/services/data_service.py

import json
import logging
from datetime import date
from io import BytesIO
from typing import Any, Optional, Union

from pydantic import ValidationError

from byteinvoice.config import BACKUP_BUCKET
from byteinvoice.models import AppData

logger = logging.getLogger(__name__)


def export_data(app_data: AppData) -> str:
    """Serializes the export document as pretty-printed JSON (2-space indent)."""
    return json.dumps(app_data.to_json_dict(), indent=2, ensure_ascii=False)


def backup_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"byte-invoice-backup-{today.isoformat()}.json"


def _is_valid_import_structure(data: Any) -> bool:
    return (
        isinstance(data, dict)
        and bool(data.get("company"))
        and isinstance(data.get("clients"), list)
        and isinstance(data.get("products"), list)
        and isinstance(data.get("invoices"), list)
        and bool(data.get("version"))
        and bool(data.get("exportDate") or data.get("export_date"))
    )


def parse_import_data(raw: Union[str, bytes]) -> AppData:
    """
    Parses an export document.

    Args:
        raw (str | bytes): Contents of a backup file.

    Returns:
        AppData: The validated document. Invoice dates are converted back to
        calendar dates; a missing `settings` block gets the defaults.

    Raises:
        ValueError: If the text is not JSON or does not have the export structure.
    """
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8-sig")
        data = json.loads(raw)
        if not _is_valid_import_structure(data):
            raise ValueError("Invalid data format")
        if data.get("settings") is None:
            data.pop("settings", None)
        return AppData.model_validate(data)
    except (ValueError, ValidationError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are ValueErrors too
        logger.warning("Rejected import file: %s", e)
        raise ValueError(f"Failed to parse import file: {e}") from e


def create_backup(app_data: AppData, storage, today: Optional[date] = None) -> str:
    """
    Stores the export document in the backup bucket.

    Returns:
        str: The storage path (bucket/object) of the backup.
    """
    payload = export_data(app_data).encode("utf-8")
    object_path = storage.upload_file(
        bucket_name=BACKUP_BUCKET,
        object_name=backup_filename(today),
        data=BytesIO(payload),
        length=len(payload),
        content_type="application/json",
    )
    logger.info("Backup written to %s", object_path)
    return object_path
