"""HubSpot CRM contact sync for submissions."""

import logging
from typing import Any, Dict, Mapping, Optional

import requests

from settings import Settings, get_settings
from utils.name_utils import split_name
from utils.normalizers import normalize_value

logger = logging.getLogger(__name__)

HUBSPOT_CONTACTS_URL = "https://api.hubapi.com/crm/v3/objects/contacts"
PROVIDER = "hubspot-crm"


def build_contact_properties(record: Mapping[str, Any]) -> Dict[str, str]:
    first, last = split_name(record.get("name"))
    properties = {"email": normalize_value(record.get("email"))}
    if first:
        properties["firstname"] = first
    if last:
        properties["lastname"] = last
    company = normalize_value(record.get("company"))
    if company:
        properties["company"] = company
    return properties


def send_to_crm(record: Mapping[str, Any], settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Create a HubSpot contact for a submission.

    Returns a status dict: "skipped" without an access token, "sent" on a 2xx,
    "failed" with the HTTP code otherwise and "error" when the request itself
    raised. Never raises.
    """
    settings = settings or get_settings()
    token = settings.hubspot_access_token
    if not token:
        logger.debug("send_to_crm: HUBSPOT_ACCESS_TOKEN not set, skipping")
        return {"status": "skipped"}

    try:
        response = requests.post(
            HUBSPOT_CONTACTS_URL,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {token}",
            },
            json={"properties": build_contact_properties(record)},
            timeout=settings.hubspot_timeout,
        )
    except requests.RequestException as exc:
        logger.exception("send_to_crm: HubSpot request failed")
        return {"status": "error", "error": str(exc), "provider": PROVIDER}

    if not response.ok:
        logger.warning("send_to_crm: HubSpot returned %s", response.status_code)
        return {"status": "failed", "code": response.status_code, "provider": PROVIDER}

    return {"status": "sent", "code": response.status_code, "provider": PROVIDER}
