# byteinvoice/api/data.py

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile

from byteinvoice.api.dependencies import get_database, get_storage_service
from byteinvoice.services.data_service import backup_filename, create_backup, export_data, parse_import_data
from byteinvoice.services.database_service import InvoiceDatabase

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/export", summary="Download all data as JSON")
def export_all(db: InvoiceDatabase = Depends(get_database)):
    return Response(
        content=export_data(db.export_data()),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{backup_filename()}"'},
    )


@router.post("/import", summary="Replace all data from an exported JSON file")
async def import_all(file: UploadFile = File(...), db: InvoiceDatabase = Depends(get_database)):
    """
    Imports a file produced by the export endpoint. Every table is replaced;
    nothing changes when the file is invalid.
    """
    raw = await file.read()
    try:
        data = parse_import_data(raw)
        db.import_data(data)
    except ValueError as e:
        logger.warning("Rejected import of %s: %s", file.filename, e)
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "success": True,
        "clients": len(data.clients),
        "products": len(data.products),
        "invoices": len(data.invoices),
    }


@router.post("/backup", summary="Store a backup copy in the backups bucket")
def backup_all(db: InvoiceDatabase = Depends(get_database), storage=Depends(get_storage_service)):
    try:
        path = create_backup(db.export_data(), storage)
    except RuntimeError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "path": path}


@router.delete("", status_code=204, summary="Delete all data")
def clear_all(db: InvoiceDatabase = Depends(get_database)):
    db.clear_all_data()
    return Response(status_code=204)
