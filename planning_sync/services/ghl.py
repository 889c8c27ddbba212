"""
GoHighLevel (LeadConnector) client — contact creation + connection probe.

One contact is created per lead. Any failure surfaces as DeliveryError so the
caller can isolate it per lead.
"""
import logging
import re
import requests
from datetime import datetime
from typing import Any, Dict, List, Optional

from planning_sync.config import (
    GHL_API_URL, GHL_API_VERSION, GHL_TIMEOUT_SECONDS,
    GHL_SOURCE_TAG, GHL_FALLBACK_CONTACT_NAME,
)
from planning_sync.utils import utcnow

logger = logging.getLogger('services.ghl')


class DeliveryError(Exception):
    """Raised when a lead could not be created as a CRM contact."""
    def __init__(self, message, status_code=None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def week_tag(when: datetime) -> str:
    """
    ISO-8601 year/week tag, e.g. '2026/1'.

    The year is the ISO week-numbering year (the year of that week's
    Thursday), so 2025-12-29 is '2026/1', not '2025/53'.
    """
    iso_year, iso_week, _ = when.isocalendar()
    return f"{iso_year}/{iso_week}"


def type_slug(application_type: Optional[str]) -> str:
    """'Full Planning' → 'full-planning'."""
    return re.sub(r'\s+', '-', (application_type or '').lower())


def build_contact_payload(client, lead, now: datetime) -> Dict[str, Any]:
    """Map a Lead onto the CRM contact schema."""
    return {
        'name': lead.agent_name or GHL_FALLBACK_CONTACT_NAME,
        'address1': lead.address or '',
        'postalCode': lead.postcode or '',
        'locationId': client.ghl_location_id,
        'pipelineId': client.ghl_pipeline_id,
        'stageId': client.ghl_stage_id,
        'tags': [
            GHL_SOURCE_TAG,
            type_slug(lead.application_type),
            week_tag(now),
        ],
        'customFields': _custom_fields(lead),
    }


def _custom_fields(lead) -> List[Dict[str, str]]:
    # Every key is always sent, even when the lead has no value for it
    return [
        {'key': 'planning_reference', 'value': lead.external_reference or ''},
        {'key': 'authority', 'value': lead.authority_name or ''},
        {'key': 'application_type', 'value': lead.application_type or ''},
        {'key': 'source_url', 'value': lead.source_url or ''},
    ]


class GhlClient:
    """Per-call client: credentials come from the ClientAccount being synced."""

    def __init__(self, base_url: str = GHL_API_URL, api_version: str = GHL_API_VERSION,
                 timeout: float = GHL_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip('/')
        self.api_version = api_version
        self.timeout = timeout

    def _headers(self, client, json_body=False):
        headers = {
            'Authorization': f'Bearer {client.ghl_api_key}',
            'Version': self.api_version,
            'Accept': 'application/json',
        }
        if json_body:
            headers['Content-Type'] = 'application/json'
        return headers

    def deliver(self, client, lead, now: datetime = None) -> str:
        """Create a contact for the lead and return its CRM id."""
        payload = build_contact_payload(client, lead, now or utcnow())

        try:
            response = requests.post(
                f"{self.base_url}/contacts/",
                headers=self._headers(client, json_body=True),
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise DeliveryError(f"GHL request failed: {e}") from e

        if not response.ok:
            raise DeliveryError(
                f"GHL API error: {_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            contact_id = response.json()['contact']['id']
        except (ValueError, KeyError, TypeError):
            contact_id = None
        if not contact_id:
            raise DeliveryError("GHL API error: response did not include contact.id",
                                status_code=response.status_code)

        logger.info("Created GHL contact %s for %s", contact_id, lead.external_reference)
        return contact_id

    def test_connection(self, client) -> bool:
        """Probe the client's location with its API key. Never raises."""
        try:
            response = requests.get(
                f"{self.base_url}/locations/{client.ghl_location_id}",
                headers=self._headers(client),
                timeout=self.timeout,
            )
            return response.ok
        except Exception as e:
            logger.warning("GHL connection test failed for %s: %s", getattr(client, 'id', '?'), e)
            return False


def _error_message(response) -> str:
    """Upstream message from an error body, else the HTTP reason."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get('message'):
        message = body['message']
        return ', '.join(message) if isinstance(message, list) else str(message)
    return response.reason or f"HTTP {response.status_code}"
