# byteinvoice/api/products.py

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from byteinvoice.api.dependencies import get_database
from byteinvoice.core.generators import generate_sku
from byteinvoice.core.validation import validate_product
from byteinvoice.models import Product
from byteinvoice.services.database_service import InvoiceDatabase, apply_updates

router = APIRouter()


def _require_product(db: InvoiceDatabase, product_id: str) -> Product:
    product = db.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Product '{product_id}' not found.")
    return product


@router.get("", response_model=List[Product], summary="List products")
def list_products(q: Optional[str] = None, category: Optional[str] = None, db: InvoiceDatabase = Depends(get_database)):
    products = db.get_products()
    if category:
        products = [product for product in products if product.category.lower() == category.lower()]
    if q:
        needle = q.lower()
        products = [
            product for product in products
            if any(needle in (value or "").lower() for value in (product.name, product.description, product.sku))
        ]
    return products


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED, summary="Create a product")
def create_product(product: Product, db: InvoiceDatabase = Depends(get_database)):
    """Creates a product; a blank SKU is generated from the category and name."""
    if not product.sku.strip():
        product.sku = generate_sku(product.name, product.category)
    try:
        validate_product(product)
        return db.add_product(product)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{product_id}", response_model=Product, summary="Get a product")
def get_product(product_id: str, db: InvoiceDatabase = Depends(get_database)):
    return _require_product(db, product_id)


@router.patch("/{product_id}", response_model=Product, summary="Update a product")
def update_product(product_id: str, updates: Dict[str, Any] = Body(...), db: InvoiceDatabase = Depends(get_database)):
    current = _require_product(db, product_id)
    try:
        validate_product(apply_updates(current, updates))
        return db.update_product(product_id, updates)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a product")
def delete_product(product_id: str, db: InvoiceDatabase = Depends(get_database)):
    if not db.delete_product(product_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Product '{product_id}' not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
