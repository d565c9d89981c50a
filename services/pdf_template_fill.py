"""
Fill the NoLimitCap AcroForm application template with PyMuPDF (fitz).

Widget values are set by field name, appearance streams are regenerated with
Helvetica, and the form is flattened unless asked not to. Every failure is a
TemplateFillError subclass; callers decide whether to fall back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import fitz  # PyMuPDF

from services.exceptions import (
    TemplateHasNoFieldsError,
    TemplateInvalidError,
    TemplateNotConfiguredError,
    TemplateNotFoundError,
    TemplateRejectedError,
)
from utils.name_utils import additional_owner_name, owner_name, preferred_contact_name
from utils.normalizers import format_date, normalize_value, to_yes_no

logger = logging.getLogger(__name__)

# Templates built for other brands share field names with ours
DISALLOWED_TEMPLATE_PATTERNS = ("creative", "golden-age-assisted-living")

WIDGET_FONT = "Helv"

# Record keys copied through untouched
PASSTHROUGH_FIELDS = (
    "legal_business_name", "business_dba", "business_address", "business_city", "business_state",
    "business_zip", "business_phone", "business_website", "industry", "contact_number", "email",
    "legal_entity", "business_tax_id", "credit_score", "loan_amount", "funding_timeline", "loan_use",
    "gross_annual_sales", "avg_monthly_deposits", "avg_daily_balance", "credit_card_processor",
    "outstanding_balance", "funding_company", "peak_months",
    "owner_first_name", "owner_last_name", "owner_email", "owner_ownership", "owner_ssn",
    "owner_address", "owner_city", "owner_state", "owner_zip", "owner_contact",
    "additional_owner_first_name", "additional_owner_last_name", "additional_owner_email",
    "additional_owner_address", "additional_owner_city", "additional_owner_state",
    "additional_owner_zip", "additional_owner_contact", "additional_owner_ssn",
    "additional_owner_ownership",
    "landlord_name_mortgage_company", "landlord_contact_person", "landlord_phone",
    "business_trade_reference_2", "business_trade_reference_2_contact_person",
    "business_trade_reference_2_phone",
    "business_trade_reference_3", "business_trade_reference_3_contact_person",
    "business_trade_reference_3_phone",
    "signature", "signature_additional", "id",
)

YES_NO_FIELDS = (
    "has_other_financing", "has_open_bankruptcies", "has_judgements_liens", "seasonal_business",
    "application_agreement", "contact_agreement",
)

DATE_FIELDS = (
    "business_start_date", "owner_dob", "additional_owner_dob", "application_date",
    "application_date_additional",
)


@dataclass(frozen=True)
class TemplateOptions:
    template_path: Optional[Path] = None
    flatten: bool = True


def build_field_mappings(record: Mapping[str, Any]) -> Dict[str, str]:
    """
    Translate an application record into template field name -> text.

    Besides the raw keys this adds composed names (preferred contact, owner
    print names), MM/DD/YYYY dates, YES/NO flags and the confirmation copies
    of the EIN and website shown next to the signature lines.
    """
    record = record or {}
    fields: Dict[str, str] = {key: normalize_value(record.get(key)) for key in PASSTHROUGH_FIELDS}

    for key in YES_NO_FIELDS:
        fields[key] = to_yes_no(record.get(key))
    for key in DATE_FIELDS:
        fields[key] = format_date(record.get(key))

    fields["state_of_incorporation"] = (
        normalize_value(record.get("state_of_incorporation")) or normalize_value(record.get("business_state"))
    )

    owner1 = owner_name(record)
    owner2 = additional_owner_name(record)
    fields["preferred_contact_name"] = preferred_contact_name(record)
    fields["owner1_name"] = owner1
    fields["owner2_name"] = owner2
    fields["owner1_print_name"] = owner1
    fields["owner2_print_name"] = owner2
    fields["business_tax_id_confirm"] = fields["business_tax_id"]
    fields["business_website_confirm"] = fields["business_website"]
    return fields


def resolve_template_path(options: TemplateOptions) -> Path:
    raw = normalize_value(options.template_path) if options.template_path is not None else ""
    if not raw:
        raise TemplateNotConfiguredError("No fillable PDF template path configured")

    template_path = Path(raw).expanduser().resolve()
    lowered = str(template_path).lower()
    if any(pattern in lowered for pattern in DISALLOWED_TEMPLATE_PATTERNS):
        raise TemplateRejectedError(f"Rejected non-NoLimitCap template path: {template_path}")
    return template_path


def _read_template(template_path: Path) -> bytes:
    if not template_path.is_file():
        raise TemplateNotFoundError(f"Fillable PDF template not found at {template_path}")
    try:
        return template_path.read_bytes()
    except OSError as exc:
        raise TemplateNotFoundError(f"Fillable PDF template not readable at {template_path}: {exc}") from exc


def _open_pdf(data: bytes, template_path: Path) -> fitz.Document:
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:
        raise TemplateInvalidError(f"Template is not a readable PDF: {template_path}") from exc
    if doc.needs_pass:
        doc.close()
        raise TemplateInvalidError(f"Template is password protected: {template_path}")
    if doc.page_count < 1:
        doc.close()
        raise TemplateInvalidError(f"Template has no pages: {template_path}")
    return doc


def fill_template(record: Mapping[str, Any], options: TemplateOptions) -> bytes:
    """
    Fill the configured template with a record and return new PDF bytes.

    The template file on disk is never modified. Field names the template does
    not define are skipped, as are template fields the mapping does not know.

    Raises:
        TemplateNotConfiguredError, TemplateRejectedError, TemplateNotFoundError,
        TemplateInvalidError, TemplateHasNoFieldsError

    MuPDF errors raised while filling or saving a template that did open are
    reported as TemplateInvalidError.
    """
    template_path = resolve_template_path(options)
    doc = _open_pdf(_read_template(template_path), template_path)

    try:
        if not doc.is_form_pdf:
            raise TemplateHasNoFieldsError(f"Template has no fillable fields: {template_path}")

        values = build_field_mappings(record)
        try:
            seen = filled = 0
            for page in doc:
                for widget in page.widgets() or []:
                    seen += 1
                    if widget.field_type != fitz.PDF_WIDGET_TYPE_TEXT:
                        continue
                    if widget.field_name not in values:
                        continue
                    widget.text_font = WIDGET_FONT
                    widget.field_value = values[widget.field_name]
                    widget.update()
                    filled += 1

            if not seen:
                raise TemplateHasNoFieldsError(f"Template has no fillable fields: {template_path}")

            logger.debug("fill_template: set %d fields from %s", filled, template_path.name)

            if options.flatten:
                doc.bake(annots=False, widgets=True)
            else:
                doc.need_appearances(True)

            return doc.tobytes(garbage=3, deflate=True, no_new_id=True)
        except (RuntimeError, ValueError) as exc:
            raise TemplateInvalidError(f"Template could not be filled: {template_path}: {exc}") from exc
    finally:
        doc.close()
