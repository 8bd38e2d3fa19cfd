# Overview: Service-layer reporting; dashboard summary over stored documents and inventory.

from __future__ import annotations

from ..models import DELIVERY, QUOTE
from .document_service import list_documents
from .products_service import list_products


def monthly_totals(documents) -> list[dict]:
    """
    Totals per month (YYYY-MM) split by document type, oldest month first.
    Documents without a date are grouped under "unknown".
    """
    grouped: dict[str, dict] = {}
    for doc in documents:
        month = doc.date[:7] if doc.date else "unknown"
        row = grouped.setdefault(month, {"month": month, "quote_total_cents": 0, "delivery_total_cents": 0})
        if doc.type == QUOTE:
            row["quote_total_cents"] += doc.total_cents
        else:
            row["delivery_total_cents"] += doc.total_cents
    return [grouped[m] for m in sorted(grouped)]


def dashboard_summary(*, low_stock_threshold: int = 5) -> dict:
    documents = list_documents()
    low_stock = list_products(low_stock_below=low_stock_threshold)

    return {
        "total_amount_cents": sum(d.total_cents for d in documents),
        "quote_count": sum(1 for d in documents if d.type == QUOTE),
        "delivery_count": sum(1 for d in documents if d.type == DELIVERY),
        "low_stock_count": len(low_stock),
        "low_stock_threshold": low_stock_threshold,
        "low_stock_products": [p.to_dict() for p in low_stock],
        "monthly": monthly_totals(documents),
    }
