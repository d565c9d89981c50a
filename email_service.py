"""
Email notification for new funding applications.
"""

import logging
import smtplib
from datetime import datetime
from email.header import Header
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from markupsafe import escape

from settings import Settings, get_settings
from utils.name_utils import preferred_contact_name
from utils.normalizers import normalize_value

logger = logging.getLogger(__name__)

# Template directory
TEMPLATE_DIR = Path(__file__).parent / "templates" / "email"
APPLICATION_TEMPLATE = "funding_application.html"


def _submitted_at(record: Mapping[str, Any]) -> str:
    created_at = normalize_value(record.get("created_at"))
    try:
        moment = datetime.fromisoformat(created_at.replace("Z", "+00:00")) if created_at else datetime.now()
    except ValueError:
        return created_at
    return moment.strftime("%m/%d/%Y %I:%M %p")


def build_template_context(record: Mapping[str, Any], company_name: str) -> Dict[str, str]:
    return {
        "CompanyName": company_name,
        "ApplicantName": preferred_contact_name(record),
        "Email": normalize_value(record.get("email")),
        "Phone": normalize_value(record.get("contact_number")),
        "BusinessName": normalize_value(record.get("legal_business_name")),
        "Industry": normalize_value(record.get("industry")),
        "RequestedAmount": normalize_value(record.get("loan_amount")),
        "FundingTimeline": normalize_value(record.get("funding_timeline")),
        "ApplicationId": normalize_value(record.get("id")),
        "Submitted": _submitted_at(record),
    }


def _render_template(template_name: str, context: Dict[str, Any]) -> str:
    """Render email template with context using [Placeholder] replacement; values are HTML escaped."""
    template_path = TEMPLATE_DIR / template_name
    if not template_path.exists():
        raise ValueError(f"Template {template_name} not found")

    content = template_path.read_text(encoding="utf-8")
    for key, value in context.items():
        content = content.replace(f"[{key}]", str(escape(value)) if value else "")
    return content


def build_text_body(context: Mapping[str, str]) -> str:
    return "\n".join([
        "New funding application received.",
        "",
        "APPLICANT DETAILS:",
        f"Name: {context['ApplicantName']}",
        f"Email: {context['Email']}",
        f"Phone: {context['Phone']}",
        "",
        "BUSINESS DETAILS:",
        f"Business Name: {context['BusinessName']}",
        f"Industry: {context['Industry']}",
        f"Requested Amount: {context['RequestedAmount']}",
        f"Funding Timeline: {context['FundingTimeline']}",
        "",
        f"Application ID: {context['ApplicationId']}",
        f"Submitted: {context['Submitted']}",
        "",
        "Please see the attached PDF for complete application details.",
        "",
        "---",
        context["CompanyName"],
        "www.nolimitcap.com",
    ])


def build_application_email(
    record: Mapping[str, Any],
    pdf_bytes: bytes,
    file_name: str,
    recipients: List[str],
    settings: Settings,
) -> MIMEMultipart:
    context = build_template_context(record, settings.company_name)
    subject = f"New Funding Application - {context['ApplicantName']} - {settings.company_name}"

    msg = MIMEMultipart("mixed")
    msg["From"] = f"{Header(settings.smtp_from_name, 'utf-8')} <{settings.smtp_from_email}>"
    msg["To"] = ", ".join(recipients)
    msg["Subject"] = Header(subject, "utf-8")
    msg["Message-ID"] = make_msgid(domain=settings.smtp_from_email.split("@")[-1])

    body = MIMEMultipart("alternative")
    body.attach(MIMEText(build_text_body(context), "plain", "utf-8"))
    body.attach(MIMEText(_render_template(APPLICATION_TEMPLATE, context), "html", "utf-8"))
    msg.attach(body)

    attachment = MIMEApplication(pdf_bytes, _subtype="pdf")
    attachment.add_header("Content-Disposition", "attachment", filename=file_name)
    msg.attach(attachment)
    return msg


def send_application_email(
    record: Mapping[str, Any],
    pdf_bytes: bytes,
    file_name: str,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """
    Email the generated PDF to the funding request recipients over SMTP.

    Returns a status dict ("sent" with message_id, "skipped" or "failed");
    SMTP errors are logged, not raised.
    """
    settings = settings or get_settings()
    recipients = settings.recipients
    if not recipients:
        return {"status": "skipped", "reason": "No recipients configured"}
    if not settings.smtp_host:
        return {"status": "skipped", "reason": "SMTP not configured"}

    msg = build_application_email(record, pdf_bytes, file_name, recipients, settings)

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as server:
            server.starttls()
            if settings.smtp_username and settings.smtp_password:
                server.login(settings.smtp_username, settings.smtp_password)
            server.send_message(msg, to_addrs=recipients)
    except (smtplib.SMTPException, OSError) as exc:
        logger.exception("Failed to send application email for %s", record.get("id"))
        return {"status": "failed", "error": str(exc)}

    return {"status": "sent", "message_id": msg["Message-ID"], "provider": "smtp"}
