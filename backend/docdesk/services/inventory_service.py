# Overview: Service-layer stock adjustments driven by delivery notes.

"""
Inventory Service - stock deduction for delivery notes

RULES:
- Only DELIVERY documents move stock, and only on their FIRST finalization.
  Quotes never touch stock; re-saving a final delivery never deducts again.
- Only lines with a product_id that resolves to an existing product count.
  Free-text lines and lines whose product was deleted are skipped.
- Deductions are one-way. Deleting or editing a delivery afterwards does
  not give the stock back.
"""

from __future__ import annotations

from flask import current_app

from ..models import Document, DELIVERY
from .storage_service import INVENTORY_KEY, list_entries, write_collection


def stock_effects(document: Document) -> dict[str, int]:
    """Total quantity per linked product_id on a document."""
    totals: dict[str, int] = {}
    for item in document.items:
        if not item.product_id:
            continue
        totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity
    return totals


def apply_delivery_stock(document: Document, *, commit: bool = True) -> list[dict]:
    """
    Deduct the document's linked quantities from stock.

    Callers are responsible for invoking this only on first finalization.
    Returns one adjustment dict per touched product.
    """
    if document.type != DELIVERY:
        raise ValueError("Stock is only adjusted for DELIVERY documents")

    effects = stock_effects(document)
    if not effects:
        return []

    products = list_entries(INVENTORY_KEY, for_update=True)
    by_id = {p.get("id"): p for p in products}

    adjustments = []
    for product_id, quantity in effects.items():
        product = by_id.get(product_id)
        if product is None:
            current_app.logger.warning(
                "Delivery %s references missing product id=%s; stock not adjusted",
                document.number,
                product_id,
            )
            continue

        before = int(product.get("stock") or 0)
        product["stock"] = before - quantity
        adjustments.append({
            "product_id": product_id,
            "code": product.get("code"),
            "quantity_delta": -quantity,
            "stock_before": before,
            "stock_after": product["stock"],
        })

    if adjustments:
        write_collection(INVENTORY_KEY, products, commit=commit)
        current_app.logger.info(
            "Delivery %s deducted stock for %d product(s)", document.number, len(adjustments)
        )

    return adjustments
