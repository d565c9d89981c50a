"""
Contact form routes - contact, partner and product-request submissions.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from services.application_fields import REQUIRED_CONTACT_INPUT
from services.application_service import (
    apply_crm_result,
    build_submission_record,
    get_submission_store,
    missing_fields,
)
from services.crm_service import send_to_crm
from services.exceptions import SubmissionStorageError
from settings import get_settings
from utils.normalizers import normalize_value

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_body(request: Request) -> Dict[str, Any]:
    """JSON or form-encoded request body as a plain dict."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON body")
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Request body must be an object")
        return body

    form = await request.form()
    return {key: form.get(key) for key in form.keys()}


@router.post("/api/contact")
async def submit_contact(request: Request):
    body = await read_body(request)
    if missing_fields(body, REQUIRED_CONTACT_INPUT):
        raise HTTPException(status_code=400, detail="name and email are required")

    settings = get_settings()
    form_type = normalize_value(body.get("form")) or "contact"
    record = build_submission_record(body)

    crm_result = await run_in_threadpool(send_to_crm, record, settings)
    apply_crm_result(record, crm_result)

    store = get_submission_store(settings)
    try:
        result = await run_in_threadpool(store.save_contact, record, form_type)
    except SubmissionStorageError:
        logger.exception("submit_contact failed")
        raise HTTPException(status_code=500, detail="Failed to store submission")

    response = {
        "ok": True,
        "id": record["id"],
        "crm_status": record["crm_status"],
        "storage": result["storage"],
    }
    if result.get("table"):
        response["table"] = form_type
    return response
