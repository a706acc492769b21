# services/pirep-service/src/apps/core/conf.py
"""
PIREP service settings with defaults.

Values come from settings.PIREP_SETTINGS; anything missing falls back to
DEFAULTS.
"""

from typing import Any, Dict

from django.conf import settings

DEFAULTS: Dict[str, Any] = {
    'MAX_CARGO_KG': 200_000,
    'MAX_FUEL_KG': 300_000,
    'MAX_FLIGHT_NUMBER_LENGTH': 20,
    'MAX_COMMENT_LENGTH': 200,
    'PIREPS_WEBHOOK_URL': None,
    'RANKUP_WEBHOOK_URL': None,
    'AIRLINE_NAME': 'Virtual Airline',
    'AIRLINE_CALLSIGN': 'VA',
    'WEBHOOK_TIMEOUT': 10.0,
    'WEBHOOK_RETRY_COUNT': 3,
    'WEBHOOK_BACKOFF_SECONDS': 1.0,
}


def pirep_settings() -> Dict[str, Any]:
    """Merged PIREP settings (read on every call so overrides apply)."""
    return {**DEFAULTS, **getattr(settings, 'PIREP_SETTINGS', {})}


def get_setting(name: str) -> Any:
    return pirep_settings()[name]
