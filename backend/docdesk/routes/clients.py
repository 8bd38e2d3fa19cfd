# Overview: Flask API routes for the client directory; parses input and returns JSON responses.

from flask import Blueprint, request

from ..models import Client
from ..services import clients_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_client,
    ValidationError,
)

CLIENT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "rif", "address", "phone"},
    required_on_create={"name"},
    read_only_fields={"id"},
)

clients_bp = Blueprint("clients", __name__, url_prefix="/api/clients")


@clients_bp.get("")
def list_clients_route():
    clients = clients_service.list_clients(q=request.args.get("q"))
    return {"items": [c.to_dict() for c in clients], "count": len(clients)}


@clients_bp.get("/<client_id>")
def get_client_route(client_id: str):
    client = clients_service.get_client(client_id)
    if not client:
        return {"error": "Client not found"}, 404
    return client.to_dict(), 200


@clients_bp.post("")
def create_client_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Client, payload=payload, policy=CLIENT_POLICY, partial=False)
        enforce_rules_client(patch)
        created = clients_service.create_client(patch=patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    return created.to_dict(), 201


@clients_bp.put("/<client_id>")
def save_client_route(client_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Client, payload=payload, policy=CLIENT_POLICY, partial=True)
        enforce_rules_client(patch)
        saved = clients_service.save_client(client_id=client_id, patch=patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    return saved.to_dict(), 200


@clients_bp.delete("/<client_id>")
def delete_client_route(client_id: str):
    if not clients_service.delete_client(client_id=client_id):
        return {"error": "Client not found"}, 404
    return {"ok": True}, 200
