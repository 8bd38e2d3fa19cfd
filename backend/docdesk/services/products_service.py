# backend/docdesk/services/products_service.py
"""
Products Service

Inventory CRUD over the docdesk_inventory collection.

CODE UNIQUENESS: product codes are unique (case-insensitive) across the
inventory. Descriptions are free text.
"""
from __future__ import annotations

from flask import current_app

from ..models import Product
from ..validation import ConflictError, ValidationError
from .storage_service import (
    INVENTORY_KEY,
    delete_entry,
    get_entry,
    list_entries,
    new_entry_id,
    upsert_entry,
)

PRODUCT_MUTABLE_FIELDS = {"code", "description", "price_cents", "stock", "unit"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _matches(p: Product, q: str) -> bool:
    needle = q.lower()
    return needle in p.code.lower() or needle in p.description.lower()


def list_products(q: str | None = None, low_stock_below: int | None = None) -> list[Product]:
    """
    All products ordered by code.

    Args:
        q: Case-insensitive substring filter on code or description
        low_stock_below: Only products whose stock is strictly below this value
    """
    products = [Product.from_dict(d) for d in list_entries(INVENTORY_KEY)]
    if q:
        products = [p for p in products if _matches(p, q)]
    if low_stock_below is not None:
        products = [p for p in products if p.stock < low_stock_below]
    return sorted(products, key=lambda p: (p.code.lower(), p.id))


def get_product(product_id: str) -> Product | None:
    data = get_entry(INVENTORY_KEY, product_id)
    return Product.from_dict(data) if data else None


def _ensure_code_available(code: str, product_id: str) -> None:
    wanted = code.strip().lower()
    for data in list_entries(INVENTORY_KEY):
        if data.get("id") != product_id and (data.get("code") or "").strip().lower() == wanted:
            raise ConflictError(f"Product code '{code}' already exists.")


def create_product(*, patch: dict) -> Product:
    """
    Create product using a validated patch dict.

    Raises:
        ValidationError: If code is missing
        ConflictError: If the code already exists
    """
    code = patch.get("code")
    if not code:
        raise ValidationError("code is required")

    product_id = new_entry_id()
    _ensure_code_available(code, product_id)

    p = Product(id=product_id, code=code)
    apply_product_patch(p, patch)
    upsert_entry(INVENTORY_KEY, p.to_dict())

    current_app.logger.info("Created product id=%s code=%s", p.id, p.code)
    return p


def save_product(*, product_id: str, patch: dict) -> Product:
    """
    Upsert by id.

    An existing product is patched; an unknown id creates a new product with
    that id (code then becomes required).
    """
    existing = get_product(product_id)
    if existing is None:
        if not patch.get("code"):
            raise ValidationError("code is required")
        p = Product(id=product_id, code=patch["code"])
    else:
        p = existing

    if "code" in patch:
        _ensure_code_available(patch["code"], product_id)

    apply_product_patch(p, patch)
    upsert_entry(INVENTORY_KEY, p.to_dict())
    return p


def delete_product(*, product_id: str) -> bool:
    """
    Hard-delete a product.

    Documents keep their line descriptions and prices; a later delivery
    referencing the deleted id simply skips the stock adjustment.
    """
    deleted = delete_entry(INVENTORY_KEY, product_id)
    if deleted:
        current_app.logger.info("Deleted product id=%s", product_id)
    return deleted
