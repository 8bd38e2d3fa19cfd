# Overview: Flask API routes for company settings; parses input and returns JSON responses.

from flask import Blueprint, request, current_app

from ..models import CompanySettings
from ..services import settings_service
from ..services.settings_service import SETTINGS_MUTABLE_FIELDS
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_settings,
    ValidationError,
)

SETTINGS_POLICY = ModelValidationPolicy(
    writable_fields=SETTINGS_MUTABLE_FIELDS,
)

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("")
def get_settings_route():
    return {"settings": settings_service.get_settings().to_dict()}


@settings_bp.put("")
def update_settings_route():
    """
    Update company settings. Only the provided keys change.

    Counters may be set by hand but must stay positive integers.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=CompanySettings, payload=payload, policy=SETTINGS_POLICY, partial=True)
        enforce_rules_settings(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        settings = settings_service.update_settings(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to update settings")
        return {"error": "Internal server error"}, 500

    return {"settings": settings.to_dict()}, 200
