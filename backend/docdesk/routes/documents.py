# Overview: Flask API routes for quotes and delivery notes; parses input and returns JSON responses.

"""
Documents Routes

Drafts are computed, never stored: /draft, /totals and /<id>/duplicate
return an in-memory document for the editor. Saving (POST or PUT) always
finalizes.
"""

from flask import Blueprint, request, jsonify, current_app

from ..models import Document, DocItem
from ..services import document_service
from ..services.document_service import DocumentError, DOCUMENT_TYPES
from ..services.products_service import get_product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_document,
    enforce_rules_item,
    ValidationError,
)


DOCUMENT_POLICY = ModelValidationPolicy(
    writable_fields={
        "id", "type", "date", "time", "due_date",
        "client_id", "client_name", "client_rif", "client_address", "client_phone",
        "description", "items", "tax_rate",
    },
    read_only_fields={"number", "status", "subtotal_cents", "tax_amount_cents", "total_cents"},
)

ITEM_POLICY = ModelValidationPolicy(
    writable_fields={"row_id", "product_id", "description", "unit", "quantity", "unit_price_cents"},
    read_only_fields={"line_total_cents"},
)


documents_bp = Blueprint("documents", __name__, url_prefix="/api/documents")


def parse_document_payload(payload) -> dict:
    """Validate a document payload, including each line item."""
    patch = validate_payload(model=Document, payload=payload, policy=DOCUMENT_POLICY, partial=True)
    enforce_rules_document(patch, DOCUMENT_TYPES)

    if "items" in patch:
        items = patch["items"]
        if not isinstance(items, list):
            raise ValidationError("items must be a list")

        cleaned = []
        for index, raw in enumerate(items):
            if not isinstance(raw, dict):
                raise ValidationError(f"items[{index}] must be an object")
            try:
                item = validate_payload(model=DocItem, payload=raw, policy=ITEM_POLICY, partial=True)
                enforce_rules_item(item)
            except ValidationError as e:
                raise ValidationError(f"items[{index}]: {e}")
            cleaned.append(item)
        patch["items"] = cleaned

    return patch


def _save(doc_id: str | None, payload):
    try:
        patch = parse_document_payload(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    doc_id = doc_id or patch.get("id")
    existing = document_service.get_document(doc_id) if doc_id else None
    if doc_id:
        patch["id"] = doc_id

    try:
        document = document_service.build_document(patch, existing)
        saved = document_service.save_document(document)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except DocumentError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to save document")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"document": saved.to_dict()}), (200 if existing else 201)


@documents_bp.get("")
def list_documents_route():
    doc_type = request.args.get("type")
    q = request.args.get("q")

    if doc_type:
        doc_type = doc_type.upper()
        if doc_type not in DOCUMENT_TYPES:
            return jsonify({"error": f"Invalid type. Must be one of: {', '.join(DOCUMENT_TYPES)}"}), 400

    docs = document_service.list_documents(doc_type=doc_type, q=q)
    return jsonify({"items": [d.to_dict() for d in docs], "count": len(docs)})


@documents_bp.get("/<doc_id>")
def get_document_route(doc_id: str):
    doc = document_service.get_document(doc_id)
    if not doc:
        return jsonify({"error": "Document not found"}), 404
    return jsonify({"document": doc.to_dict()})


@documents_bp.post("/draft")
def new_draft_route():
    """Fresh unsaved draft: new id, today's date, default tax rate."""
    data = request.get_json(silent=True) or {}
    doc_type = (data.get("type") or "QUOTE").upper()
    if doc_type not in DOCUMENT_TYPES:
        return jsonify({"error": f"Invalid type. Must be one of: {', '.join(DOCUMENT_TYPES)}"}), 400

    draft = document_service.new_draft(doc_type)
    return jsonify({"document": draft.to_dict()}), 200


@documents_bp.post("/totals")
def totals_route():
    """
    Recompute line totals and document totals for an unsaved draft.

    Nothing is persisted.
    """
    try:
        patch = parse_document_payload(request.get_json(silent=True) or {})
        draft = document_service.build_document(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except DocumentError as e:
        return jsonify({"error": str(e), "details": e.details}), 400

    return jsonify({"document": draft.to_dict()}), 200


@documents_bp.post("/link-product")
def link_product_route():
    """
    Link an unsaved draft's free-text lines to a product just registered
    from one of them (matched on description).

    Body: {"product_id": str, "document": {...draft...}}
    """
    data = request.get_json(silent=True) or {}
    product = get_product(data.get("product_id") or "")
    if not product:
        return jsonify({"error": "Product not found"}), 404

    try:
        patch = parse_document_payload(data.get("document") or {})
        draft = document_service.build_document(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except DocumentError as e:
        return jsonify({"error": str(e), "details": e.details}), 400

    linked = document_service.link_lines_to_product(draft, product)
    return jsonify({"document": draft.to_dict(), "linked": linked}), 200


@documents_bp.post("")
def create_document_route():
    """Save (finalize) a document. Assigns a number on first save."""
    return _save(None, request.get_json(silent=True) or {})


@documents_bp.put("/<doc_id>")
def save_document_route(doc_id: str):
    """Save (finalize) the document with this id. Re-saves keep their number."""
    return _save(doc_id, request.get_json(silent=True) or {})


@documents_bp.post("/<doc_id>/duplicate")
def duplicate_document_route(doc_id: str):
    copy = document_service.duplicate_document(doc_id)
    if not copy:
        return jsonify({"error": "Document not found"}), 404
    return jsonify({"document": copy.to_dict()}), 200


@documents_bp.delete("/<doc_id>")
def delete_document_route(doc_id: str):
    if not document_service.delete_document(doc_id):
        return jsonify({"error": "Document not found"}), 404
    return jsonify({"ok": True}), 200
