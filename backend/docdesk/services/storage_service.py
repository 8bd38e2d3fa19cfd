# Overview: Ledger Store; key-value persistence of whole collection snapshots.

"""
Ledger Store

Four collections, each kept as ONE LedgerRecord whose value is the complete
snapshot:

- docdesk_settings:  JSON object (CompanySettings)
- docdesk_documents: JSON array of Document dicts
- docdesk_inventory: JSON array of Product dicts
- docdesk_clients:   JSON array of Client dicts

INVARIANTS:
- Reads return a deep copy; callers may mutate freely without touching the
  session state.
- Writes replace the snapshot wholesale. There are no partial updates.
- Entries inside array collections are identified by their "id" key; upsert
  replaces the matching entry in place (keeping its position) or appends.

commit=False lets a caller group several writes (counter, document, stock)
into one transaction.
"""

from __future__ import annotations

import copy
import uuid

from sqlalchemy.orm.attributes import flag_modified

from ..extensions import db
from ..models import LedgerRecord
from .concurrency import lock_for_update


SETTINGS_KEY = "docdesk_settings"
DOCUMENTS_KEY = "docdesk_documents"
INVENTORY_KEY = "docdesk_inventory"
CLIENTS_KEY = "docdesk_clients"

COLLECTION_KEYS = (SETTINGS_KEY, DOCUMENTS_KEY, INVENTORY_KEY, CLIENTS_KEY)


def new_entry_id() -> str:
    return uuid.uuid4().hex


def _get_record(key: str, *, for_update: bool = False) -> LedgerRecord | None:
    q = db.session.query(LedgerRecord).filter(LedgerRecord.key == key)
    if for_update:
        q = lock_for_update(q)
    return q.first()


def read_collection(key: str, default=None, *, for_update: bool = False):
    """Return a private copy of the stored snapshot, or default if never written."""
    record = _get_record(key, for_update=for_update)
    if record is None or record.value is None:
        return copy.deepcopy(default)
    return copy.deepcopy(record.value)


def write_collection(key: str, value, *, commit: bool = True) -> None:
    """Replace the snapshot for key."""
    if key not in COLLECTION_KEYS:
        raise ValueError(f"Unknown collection key: {key}")

    record = _get_record(key)
    if record is None:
        record = LedgerRecord(key=key, value=value)
        db.session.add(record)
    else:
        record.value = value
        flag_modified(record, "value")

    db.session.flush()
    if commit:
        db.session.commit()


def list_entries(key: str, *, for_update: bool = False) -> list[dict]:
    return read_collection(key, [], for_update=for_update)


def get_entry(key: str, entry_id: str) -> dict | None:
    for entry in list_entries(key):
        if entry.get("id") == entry_id:
            return entry
    return None


def upsert_entry(key: str, entry: dict, *, commit: bool = True) -> dict:
    """
    Insert or replace the entry whose id matches entry["id"].

    Returns the stored entry.
    """
    entry_id = entry.get("id")
    if not entry_id:
        raise ValueError("entry id is required")

    entries = list_entries(key, for_update=True)
    for index, existing in enumerate(entries):
        if existing.get("id") == entry_id:
            entries[index] = entry
            break
    else:
        entries.append(entry)

    write_collection(key, entries, commit=commit)
    return entry


def delete_entry(key: str, entry_id: str, *, commit: bool = True) -> bool:
    """
    Remove the entry with the given id.

    Returns True if an entry was removed, False if none matched. All other
    entries are written back unchanged and in order.
    """
    entries = list_entries(key, for_update=True)
    for index, existing in enumerate(entries):
        if existing.get("id") == entry_id:
            del entries[index]
            break
    else:
        return False

    write_collection(key, entries, commit=commit)
    return True
