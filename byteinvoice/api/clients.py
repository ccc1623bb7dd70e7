# byteinvoice/api/clients.py

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from byteinvoice.api.dependencies import get_database, require_client
from byteinvoice.core.validation import validate_client
from byteinvoice.models import Client
from byteinvoice.services.database_service import InvoiceDatabase, apply_updates

router = APIRouter()


@router.get("", response_model=List[Client], summary="List clients")
def list_clients(q: Optional[str] = None, db: InvoiceDatabase = Depends(get_database)):
    """
    Lists clients in insertion order. `q` filters case-insensitively on
    name, email, city and country.
    """
    clients = db.get_clients()
    if q:
        needle = q.lower()
        clients = [
            client for client in clients
            if any(needle in (value or "").lower() for value in (client.name, client.email, client.city, client.country))
        ]
    return clients


@router.post("", response_model=Client, status_code=status.HTTP_201_CREATED, summary="Create a client")
def create_client(client: Client, db: InvoiceDatabase = Depends(get_database)):
    try:
        validate_client(client)
        return db.add_client(client)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{client_id}", response_model=Client, summary="Get a client")
def get_client(client_id: str, db: InvoiceDatabase = Depends(get_database)):
    return require_client(db, client_id)


@router.patch("/{client_id}", response_model=Client, summary="Update a client")
def update_client(client_id: str, updates: Dict[str, Any] = Body(...), db: InvoiceDatabase = Depends(get_database)):
    """Partial update; only the supplied fields change."""
    current = require_client(db, client_id)
    try:
        validate_client(apply_updates(current, updates))
        return db.update_client(client_id, updates)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a client")
def delete_client(client_id: str, db: InvoiceDatabase = Depends(get_database)):
    if not db.delete_client(client_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Client '{client_id}' not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
