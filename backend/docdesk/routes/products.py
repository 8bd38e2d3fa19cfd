# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/docdesk/routes/products.py
"""
Product (inventory) routes.

Upsert semantics on PUT: an unknown id creates the product with that id.
"""
from flask import Blueprint, request, current_app
from ..services.products_service import (
    list_products as list_products_service,
    get_product,
)
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    ConflictError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"code", "description", "price_cents", "stock", "unit"},
    required_on_create={"code"},
    read_only_fields={"id"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    """
    List all products.

    Query params:
    - q: str (optional) - substring match on code or description
    - low_stock: 1 (optional) - only products below the low-stock threshold
    """
    q = request.args.get("q")
    low_stock = request.args.get("low_stock", type=int)
    threshold = current_app.config["LOW_STOCK_THRESHOLD"] if low_stock else None

    products = list_products_service(q=q, low_stock_below=threshold)
    return {"items": [p.to_dict() for p in products], "count": len(products)}


@products_bp.get("/<product_id>")
def get_product_route(product_id: str):
    product = get_product(product_id)
    if not product:
        return {"error": "Product not found"}, 404
    return product.to_dict(), 200


@products_bp.post("")
def create_product_route():
    """Create a new product with a generated id."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)  # Handles price validation including max check
    except ValidationError as e:
        return {"error": str(e)}, 400

    from ..services.products_service import create_product

    try:
        created = create_product(patch=patch)
    except ConflictError as e:
        return {"error": str(e)}, 409
    except ValueError as e:
        return {"error": str(e)}, 400

    return created.to_dict(), 201


@products_bp.put("/<product_id>")
def save_product_route(product_id: str):
    """Update (or create) the product with this id."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    from ..services.products_service import save_product

    try:
        saved = save_product(product_id=product_id, patch=patch)
    except ConflictError as e:
        return {"error": str(e)}, 409
    except ValueError as e:
        return {"error": str(e)}, 400

    return saved.to_dict(), 200


@products_bp.delete("/<product_id>")
def delete_product_route(product_id: str):
    from ..services.products_service import delete_product

    if not delete_product(product_id=product_id):
        return {"error": "Product not found"}, 404

    return {"ok": True}, 200
