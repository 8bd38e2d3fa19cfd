# Overview: Document engine; numbering, totals and the save/finalize path for quotes and delivery notes.

"""
Document Service

TOTALS (pure):
    line_total = quantity * unit_price
    subtotal   = sum(line_total)
    tax_amount = subtotal * rate / 100, rounded half-up to the cent
    total      = subtotal + tax_amount

NUMBERING:
    A document without a number receives "{prefix}{counter:06d}" from the
    counter matching its type, and that counter moves forward by one.
    Numbered documents keep their number forever and consume nothing on
    re-save.

SAVE:
    Counter increment, document write and (for first-time deliveries) stock
    deduction commit in a single transaction, so a failure leaves neither a
    skipped nor a duplicated number behind.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, NamedTuple

from flask import current_app

from ..extensions import db
from ..models import (
    Client,
    CompanySettings,
    DocItem,
    Document,
    Product,
    DELIVERY,
    QUOTE,
    STATUS_DRAFT,
    STATUS_FINAL,
)
from ..time_utils import localnow, time_str, today_str
from ..validation import ValidationError
from .clients_service import get_client
from .concurrency import run_with_retry
from .inventory_service import apply_delivery_stock, stock_effects
from .products_service import get_product
from .settings_service import get_settings, save_settings
from .storage_service import (
    DOCUMENTS_KEY,
    delete_entry,
    get_entry,
    list_entries,
    new_entry_id,
    upsert_entry,
)


class DocumentError(Exception):
    """Raised for document engine errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


DOCUMENT_PREFIXES = {
    QUOTE: "PRE-",
    DELIVERY: "NE-",
}

DOCUMENT_TYPES = tuple(DOCUMENT_PREFIXES.keys())

COUNTER_FIELDS = {
    QUOTE: "next_quote_number",
    DELIVERY: "next_delivery_number",
}

NUMBER_PAD = 6

CENT = Decimal("1")


class Totals(NamedTuple):
    subtotal_cents: int
    tax_amount_cents: int
    total_cents: int


# =============================================================================
# Totals
# =============================================================================

def line_total_cents(quantity: int, unit_price_cents: int) -> int:
    return quantity * unit_price_cents


def compute_totals(items: Iterable[DocItem], tax_rate) -> Totals:
    """
    Pure totals computation over (items, tax rate in percent).

    Line totals are derived from quantity and unit price here, whatever the
    items currently carry in line_total_cents.
    """
    if tax_rate is None or tax_rate < 0:
        raise DocumentError("tax_rate must be >= 0")

    subtotal = sum(line_total_cents(i.quantity, i.unit_price_cents) for i in items)
    tax = (Decimal(subtotal) * Decimal(str(tax_rate)) / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)
    tax_cents = int(tax)
    return Totals(subtotal_cents=subtotal, tax_amount_cents=tax_cents, total_cents=subtotal + tax_cents)


def recalculate(document: Document) -> Document:
    """
    Refresh every line total and the document totals in place.

    Call after any change to items (add, remove, quantity, price) or to the
    tax rate. Nothing observes the document for you.
    """
    for item in document.items:
        item.line_total_cents = line_total_cents(item.quantity, item.unit_price_cents)

    totals = compute_totals(document.items, document.tax_rate)
    document.subtotal_cents = totals.subtotal_cents
    document.tax_amount_cents = totals.tax_amount_cents
    document.total_cents = totals.total_cents
    return document


# =============================================================================
# Numbering
# =============================================================================

def format_document_number(doc_type: str, counter: int, pad: int = NUMBER_PAD) -> str:
    prefix = DOCUMENT_PREFIXES.get(doc_type)
    if prefix is None:
        raise DocumentError(f"Unknown document type: {doc_type}")
    if counter < 1:
        raise DocumentError("Document counters start at 1")
    return f"{prefix}{counter:0{pad}d}"


def assign_document_number(document: Document, settings: CompanySettings) -> bool:
    """
    Give document its number from the matching settings counter.

    settings is modified in place (counter + 1); the caller persists it.
    Returns True if a number was assigned, False if the document already
    had one.
    """
    if document.number:
        return False

    counter_field = COUNTER_FIELDS.get(document.type)
    if counter_field is None:
        raise DocumentError(f"Unknown document type: {document.type}")

    counter = getattr(settings, counter_field)
    document.number = format_document_number(document.type, counter)
    setattr(settings, counter_field, counter + 1)
    return True


# =============================================================================
# Drafts
# =============================================================================

def new_draft(doc_type: str = QUOTE, settings: CompanySettings | None = None) -> Document:
    """Empty in-memory draft dated now, taxed at the default rate."""
    if doc_type not in DOCUMENT_TYPES:
        raise DocumentError(f"Unknown document type: {doc_type}")
    settings = settings or get_settings()
    now = localnow()
    return Document(
        id=new_entry_id(),
        type=doc_type,
        status=STATUS_DRAFT,
        date=today_str(now),
        time=time_str(now),
        tax_rate=settings.default_tax_rate,
    )


def build_product_line(product: Product, quantity: int = 1) -> DocItem:
    """Line pre-filled from an inventory product."""
    item = DocItem(
        row_id=new_entry_id(),
        product_id=product.id,
        description=product.description or product.code,
        unit=product.unit,
        quantity=quantity,
        unit_price_cents=product.price_cents,
    )
    item.line_total_cents = line_total_cents(item.quantity, item.unit_price_cents)
    return item


def copy_client_fields(document: Document, client: Client) -> Document:
    """Snapshot the client's current details onto the document."""
    document.client_id = client.id
    document.client_name = client.name
    document.client_rif = client.rif
    document.client_address = client.address
    document.client_phone = client.phone
    return document


def link_lines_to_product(document: Document, product: Product) -> int:
    """
    Attach free-text lines to a product registered from one of them.

    Every unlinked line whose description matches the product's takes its
    id, unit and price. Totals are recalculated. Returns the number of
    lines linked.
    """
    linked = 0
    for item in document.items:
        if item.product_id or item.description != product.description:
            continue
        item.product_id = product.id
        item.unit = product.unit
        item.unit_price_cents = product.price_cents
        linked += 1

    recalculate(document)
    return linked


def _hydrate_item(item: dict) -> DocItem:
    # Lines that only name a product take its description, unit and price.
    data = {**item, "row_id": item.get("row_id") or new_entry_id()}
    product_id = data.get("product_id")
    if product_id:
        product = get_product(product_id)
        if product is not None:
            data.setdefault("description", product.description or product.code)
            data.setdefault("unit", product.unit)
            data.setdefault("unit_price_cents", product.price_cents)
    return DocItem.from_dict(data)


def build_document(patch: dict, existing: Document | None = None) -> Document:
    """
    Apply a validated document patch on top of existing (or a fresh draft).

    Items, when present in the patch, replace the whole item list. A
    client_id without a client_name pulls the client's details from the
    directory. Totals are recalculated before returning.
    """
    document = existing or new_draft(patch.get("type", QUOTE))
    if existing is None and patch.get("id"):
        document.id = patch["id"]

    for k, v in patch.items():
        if k in ("id", "items"):
            continue
        setattr(document, k, v)

    if patch.get("client_id") and not patch.get("client_name"):
        client = get_client(patch["client_id"])
        if client is not None:
            copy_client_fields(document, client)

    if "items" in patch:
        document.items = [_hydrate_item(item) for item in patch["items"]]

    return recalculate(document)


def duplicate_document(doc_id: str) -> Document | None:
    """
    Copy an existing document into a new unnumbered draft dated now.

    The copy is not persisted until saved.
    """
    source = get_document(doc_id)
    if source is None:
        return None

    now = localnow()
    copy = Document.from_dict(source.to_dict())
    copy.id = new_entry_id()
    copy.number = ""
    copy.status = STATUS_DRAFT
    copy.date = today_str(now)
    copy.time = time_str(now)
    for item in copy.items:
        item.row_id = new_entry_id()
    return recalculate(copy)


# =============================================================================
# Persistence
# =============================================================================

def _sort_key(d: Document) -> tuple:
    return (d.date or "", d.time or "", d.number)


def list_documents(doc_type: str | None = None, q: str | None = None) -> list[Document]:
    """
    Stored documents, newest first.

    Args:
        doc_type: QUOTE or DELIVERY
        q: Case-insensitive match on number, client name or description
    """
    docs = [Document.from_dict(d) for d in list_entries(DOCUMENTS_KEY)]
    if doc_type:
        docs = [d for d in docs if d.type == doc_type]
    if q:
        needle = q.lower()
        docs = [
            d for d in docs
            if needle in d.number.lower()
            or needle in d.client_name.lower()
            or needle in d.description.lower()
        ]
    return sorted(docs, key=_sort_key, reverse=True)


def get_document(doc_id: str) -> Document | None:
    data = get_entry(DOCUMENTS_KEY, doc_id)
    return Document.from_dict(data) if data else None


def save_document(document: Document) -> Document:
    """
    Finalize and persist a document.

    - client_name is required
    - totals are recomputed
    - first save: number assigned from settings, counter advanced, and for
      DELIVERY documents linked stock deducted
    - later saves: number, type and stock untouched

    Everything commits together.
    """
    original_number = document.number
    original_status = document.status

    def _op() -> Document:
        # A retried attempt must start from the caller's state.
        document.number = original_number
        document.status = original_status

        if not (document.client_name or "").strip():
            raise ValidationError("client_name is required")

        stored = get_document(document.id)
        if stored is not None and stored.number:
            if stored.type != document.type:
                raise ValidationError("Cannot change the type of a finalized document")
            document.number = stored.number

        recalculate(document)

        settings = get_settings()
        first_finalization = assign_document_number(document, settings)
        if first_finalization:
            save_settings(settings, commit=False)

        document.status = STATUS_FINAL
        upsert_entry(DOCUMENTS_KEY, document.to_dict(), commit=False)

        if first_finalization and document.type == DELIVERY:
            apply_delivery_stock(document, commit=False)

        db.session.commit()
        return document

    try:
        saved = run_with_retry(_op)
    except Exception:
        # Nothing was stored; hand the caller back an unnumbered document.
        document.number = original_number
        document.status = original_status
        raise
    current_app.logger.info("Saved document %s (%s) total_cents=%s", saved.number, saved.type, saved.total_cents)
    return saved


def delete_document(doc_id: str) -> bool:
    """
    Delete a stored document. Irreversible.

    Stock deducted by a final delivery stays deducted; the untouched
    quantities are logged so they can be corrected by hand.
    """
    document = get_document(doc_id)
    if document is None:
        return False

    deleted = delete_entry(DOCUMENTS_KEY, doc_id)
    if deleted and document.type == DELIVERY and document.is_final:
        effects = stock_effects(document)
        if effects:
            current_app.logger.warning(
                "Deleted delivery %s; stock deductions were not reversed: %s",
                document.number,
                ", ".join(f"{pid}={qty}" for pid, qty in sorted(effects.items())),
            )
    return deleted
