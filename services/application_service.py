"""
Submission pipeline: record building, PDF generation and the collaborator
calls (CRM, S3, email) that follow an application.
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from db import get_session_factory
from email_service import send_application_email
from services.application_fields import APPLICATION_FIELDS, CONTACT_FIELDS
from services.crm_service import send_to_crm
from services.exceptions import PdfRenderError
from services.object_storage import upload_pdf
from services.pdf_generation import generate_application_pdf
from services.pdf_layout import RenderOptions
from services.pdf_template_fill import TemplateOptions
from services.submission_store import SubmissionStore
from settings import Settings, get_settings
from utils.name_utils import compose_name
from utils.normalizers import normalize_value

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def missing_fields(payload: Mapping[str, Any], required: Iterable[str]) -> List[str]:
    return [field for field in required if not normalize_value(payload.get(field))]


def _pick(payload: Mapping[str, Any], allowed: Iterable[str]) -> Dict[str, str]:
    record = {}
    for field in allowed:
        value = normalize_value(payload.get(field))
        if value:
            record[field] = value
    return record


def build_submission_record(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Contact / partner / product-request record: id, timestamp and the allowed non-empty fields."""
    return {
        "id": str(uuid.uuid4()),
        "created_at": _now_iso(),
        **_pick(payload, CONTACT_FIELDS),
    }


def build_application_record(payload: Mapping[str, Any], files: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    record = {
        "id": str(uuid.uuid4()),
        "created_at": _now_iso(),
        **_pick(payload, APPLICATION_FIELDS),
    }
    record["name"] = compose_name(record.get("first_name"), record.get("last_name"))
    record["company"] = record.get("legal_business_name") or record.get("business_dba") or ""
    record["files"] = list(files or [])
    return record


def application_pdf_filename(record: Mapping[str, Any]) -> str:
    created_at = normalize_value(record.get("created_at")) or _now_iso()
    safe_date = created_at.replace(":", "-").replace(".", "-")
    return f"funding-request-{safe_date}-{record.get('id')}.pdf"


def template_options_from(settings: Settings) -> TemplateOptions:
    return TemplateOptions(template_path=settings.pdf_template_path, flatten=True)


def render_options_from(settings: Settings, **overrides) -> RenderOptions:
    options = {
        "company_name": settings.company_name,
        "margin": settings.pdf_margin,
        "logo_path": settings.logo_path,
        "header_scale": settings.pdf_header_scale,
    }
    options.update(overrides)
    return RenderOptions(**options)


def generate_and_store_pdf(record: Mapping[str, Any], settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Generate the application PDF (template first, layout fallback) and write
    it to generated_pdf_dir.

    Raises:
        PdfRenderError: If neither path produced a document.
    """
    settings = settings or get_settings()
    generated = generate_application_pdf(record, template_options_from(settings), render_options_from(settings))

    output_dir = Path(settings.generated_pdf_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    file_name = application_pdf_filename(record)
    file_path = output_dir / file_name
    file_path.write_bytes(generated.pdf_bytes)

    logger.info(
        "Generated %s from %s",
        file_name,
        generated.source,
        extra={"application_id": record.get("id"), "pdf_source": generated.source},
    )
    return {
        "file_name": file_name,
        "file_path": str(file_path),
        "pdf_bytes": generated.pdf_bytes,
        "source": generated.source,
        "fallback_reason": generated.fallback_reason,
    }


def apply_crm_result(record: Dict[str, Any], crm_result: Mapping[str, Any]) -> None:
    record["crm_status"] = crm_result.get("status")
    if crm_result.get("code"):
        record["crm_code"] = crm_result["code"]
    if crm_result.get("provider"):
        record["crm_provider"] = crm_result["provider"]


def process_application(record: Dict[str, Any], settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Run the post-submission steps on an application record in place:
    CRM sync, PDF generation, S3 upload and email. Failures are recorded in
    the status fields; nothing here raises for a collaborator outage.
    """
    settings = settings or get_settings()

    crm_result = send_to_crm(
        {"name": record.get("name"), "email": record.get("email"), "company": record.get("company")},
        settings,
    )
    apply_crm_result(record, crm_result)

    try:
        pdf_data = generate_and_store_pdf(record, settings)
    except (PdfRenderError, OSError) as exc:
        logger.exception(
            "PDF generation failed for application %s", record.get("id"), extra={"application_id": record.get("id")}
        )
        record["pdf_status"] = "failed"
        record["email_status"] = "failed"
        record["pdf_error"] = str(exc)
        return record

    record["generated_pdf_filename"] = pdf_data["file_name"]
    record["generated_pdf"] = {"file_name": pdf_data["file_name"], "file_path": pdf_data["file_path"]}
    record["pdf_source"] = pdf_data["source"]
    record["pdf_status"] = "generated"

    s3_result = upload_pdf(pdf_data["pdf_bytes"], pdf_data["file_name"], settings)
    if s3_result.get("status") == "uploaded":
        record["generated_pdf_url"] = s3_result["s3_url"]
        record["generated_pdf_s3_key"] = s3_result["s3_key"]

    mail_result = send_application_email(record, pdf_data["pdf_bytes"], pdf_data["file_name"], settings)
    record["email_status"] = mail_result.get("status")
    if mail_result.get("message_id"):
        record["email_message_id"] = mail_result["message_id"]
    if mail_result.get("provider"):
        record["email_provider"] = mail_result["provider"]

    return record


def get_submission_store(settings: Optional[Settings] = None) -> SubmissionStore:
    settings = settings or get_settings()
    return SubmissionStore(settings.data_dir, get_session_factory())
