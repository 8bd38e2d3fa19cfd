# Overview: Service-layer operations for company settings; merge-with-defaults reads and wholesale writes.

from __future__ import annotations

from dataclasses import asdict

from flask import current_app

from ..models import CompanySettings, DELIVERY, QUOTE
from ..validation import ValidationError
from .storage_service import DOCUMENTS_KEY, SETTINGS_KEY, list_entries, read_collection, write_collection


DEFAULT_SETTINGS = asdict(CompanySettings())

SETTINGS_MUTABLE_FIELDS = set(DEFAULT_SETTINGS.keys())


def get_settings() -> CompanySettings:
    """
    Load the settings singleton.

    Stored values are layered over DEFAULT_SETTINGS, so keys added in later
    versions (or never saved) fall back to their defaults.
    """
    saved = read_collection(SETTINGS_KEY, {}) or {}
    return CompanySettings.from_dict({**DEFAULT_SETTINGS, **saved})


def save_settings(settings: CompanySettings, *, commit: bool = True) -> CompanySettings:
    write_collection(SETTINGS_KEY, settings.to_dict(), commit=commit)
    return settings


COUNTER_TYPES = {
    "next_quote_number": QUOTE,
    "next_delivery_number": DELIVERY,
}


def highest_issued_counters() -> dict[str, int]:
    """Largest counter already used per document type (0 if none)."""
    highest = {doc_type: 0 for doc_type in COUNTER_TYPES.values()}
    for doc in list_entries(DOCUMENTS_KEY):
        doc_type = doc.get("type")
        digits = (doc.get("number") or "").rpartition("-")[2]
        if doc_type in highest and digits.isdigit():
            highest[doc_type] = max(highest[doc_type], int(digits))
    return highest


def update_settings(patch: dict) -> CompanySettings:
    """
    Apply a validated patch and persist the whole settings object.

    Counters may be moved by hand (e.g. to continue a paper numbering
    series) but never back onto a number already issued.
    """
    if any(k in patch for k in COUNTER_TYPES):
        highest = highest_issued_counters()
        for field, doc_type in COUNTER_TYPES.items():
            if field in patch and patch[field] <= highest[doc_type]:
                raise ValidationError(
                    f"{field} must be greater than {highest[doc_type]}, the last {doc_type} number issued"
                )

    settings = get_settings()
    for k, v in patch.items():
        if k not in SETTINGS_MUTABLE_FIELDS:
            continue
        setattr(settings, k, v)

    save_settings(settings)
    current_app.logger.info("Settings updated: %s", ", ".join(sorted(patch.keys())))
    return settings


def ensure_settings() -> CompanySettings:
    """Write defaults if settings were never saved. Idempotent."""
    if read_collection(SETTINGS_KEY) is None:
        return save_settings(CompanySettings())
    return get_settings()
