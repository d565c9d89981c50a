"""
Funding application routes - submission with bank statements and the blank form download.
"""

import logging
import re
import shutil
import time
import uuid
from pathlib import Path
from typing import Any, Dict, List, Tuple

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from starlette.datastructures import UploadFile

from services.application_fields import REQUIRED_APPLICATION_INPUT
from services.application_service import (
    build_application_record,
    get_submission_store,
    missing_fields,
    process_application,
    render_options_from,
)
from services.exceptions import PdfRenderError, SubmissionStorageError
from services.pdf_layout import render_application_pdf
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_FIELD = "bank_statements"
UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


async def read_application_payload(request: Request) -> Tuple[Dict[str, Any], List[UploadFile]]:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON body")
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Request body must be an object")
        return body, []

    form = await request.form()
    payload: Dict[str, Any] = {}
    uploads: List[UploadFile] = []
    for key in form.keys():
        values = form.getlist(key)
        if key == UPLOAD_FIELD:
            uploads.extend(value for value in values if isinstance(value, UploadFile) and value.filename)
            continue
        texts = [value for value in values if isinstance(value, str)]
        if texts:
            payload[key] = texts[0] if len(texts) == 1 else texts
    return payload, uploads


def save_uploads(uploads: List[UploadFile], settings: Settings) -> List[Dict[str, Any]]:
    """Copy bank statements into uploads_dir and describe them for the record."""
    if len(uploads) > settings.max_upload_files:
        raise HTTPException(
            status_code=400,
            detail=f"At most {settings.max_upload_files} files may be uploaded",
        )

    uploads_dir = Path(settings.uploads_dir)
    uploads_dir.mkdir(parents=True, exist_ok=True)

    saved: List[Dict[str, Any]] = []
    for upload in uploads:
        original_name = Path(upload.filename).name
        safe_name = UNSAFE_FILENAME_RE.sub("_", original_name) or "upload"
        stored_name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{safe_name}"
        dest_path = uploads_dir / stored_name

        with dest_path.open("wb") as f:
            shutil.copyfileobj(upload.file, f)

        size = dest_path.stat().st_size
        if size > settings.max_upload_bytes:
            dest_path.unlink(missing_ok=True)
            raise HTTPException(status_code=400, detail=f"{original_name} exceeds the upload size limit")

        saved.append({
            "original_name": original_name,
            "stored_name": stored_name,
            "size": size,
            "type": upload.content_type,
        })
    return saved


@router.post("/api/apply")
async def submit_application(request: Request):
    payload, uploads = await read_application_payload(request)
    if missing_fields(payload, REQUIRED_APPLICATION_INPUT):
        raise HTTPException(status_code=400, detail="first_name, last_name, and email are required")

    settings = get_settings()
    files = await run_in_threadpool(save_uploads, uploads, settings)
    record = build_application_record(payload, files)

    record = await run_in_threadpool(process_application, record, settings)

    store = get_submission_store(settings)
    try:
        result = await run_in_threadpool(store.save_application, record)
    except SubmissionStorageError:
        logger.exception("submit_application failed")
        raise HTTPException(status_code=500, detail="Failed to store application")

    return {
        "ok": True,
        "id": record["id"],
        "crm_status": record.get("crm_status"),
        "pdf_status": record.get("pdf_status"),
        "email_status": record.get("email_status"),
        "storage": result["storage"],
    }


@router.get("/api/application-form.pdf")
async def application_form():
    """Blank application form rendered by the layout engine."""
    settings = get_settings()
    options = render_options_from(settings, empty_fields=True)
    try:
        pdf_bytes = await run_in_threadpool(render_application_pdf, {}, options)
    except PdfRenderError:
        logger.exception("application_form failed")
        raise HTTPException(status_code=500, detail="Failed to render application form")

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": 'inline; filename="nolimitcap-application-form.pdf"'},
    )
