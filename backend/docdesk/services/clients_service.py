# Overview: Service-layer operations for the client directory.

from __future__ import annotations

from ..models import Client
from ..validation import ValidationError
from .storage_service import (
    CLIENTS_KEY,
    delete_entry,
    get_entry,
    list_entries,
    new_entry_id,
    upsert_entry,
)

CLIENT_MUTABLE_FIELDS = {"name", "rif", "address", "phone"}


def apply_client_patch(c: Client, patch: dict) -> None:
    for k, v in patch.items():
        if k not in CLIENT_MUTABLE_FIELDS:
            continue
        setattr(c, k, v)


def list_clients(q: str | None = None) -> list[Client]:
    """Clients ordered by name; q filters on name or rif (case-insensitive)."""
    clients = [Client.from_dict(d) for d in list_entries(CLIENTS_KEY)]
    if q:
        needle = q.lower()
        clients = [c for c in clients if needle in c.name.lower() or needle in c.rif.lower()]
    return sorted(clients, key=lambda c: (c.name.lower(), c.id))


def get_client(client_id: str) -> Client | None:
    data = get_entry(CLIENTS_KEY, client_id)
    return Client.from_dict(data) if data else None


def create_client(*, patch: dict) -> Client:
    if not patch.get("name"):
        raise ValidationError("name is required")

    c = Client(id=new_entry_id(), name=patch["name"])
    apply_client_patch(c, patch)
    upsert_entry(CLIENTS_KEY, c.to_dict())
    return c


def save_client(*, client_id: str, patch: dict) -> Client:
    """Upsert by id; an unknown id creates the client (name then required)."""
    c = get_client(client_id)
    if c is None:
        if not patch.get("name"):
            raise ValidationError("name is required")
        c = Client(id=client_id, name=patch["name"])

    apply_client_patch(c, patch)
    upsert_entry(CLIENTS_KEY, c.to_dict())
    return c


def delete_client(*, client_id: str) -> bool:
    # Documents hold a copy of the client fields, nothing else to clean up.
    return delete_entry(CLIENTS_KEY, client_id)
