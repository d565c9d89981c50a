"""
Choose between the fillable template and the programmatic layout.

The template is tried first; any TemplateFillError is turned into a failed
attempt and the layout renderer produces the document instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from services.exceptions import TemplateFillError
from services.pdf_layout import RenderOptions, render_application_pdf
from services.pdf_template_fill import TemplateOptions, fill_template

logger = logging.getLogger(__name__)

SOURCE_TEMPLATE = "template"
SOURCE_LAYOUT = "layout"


@dataclass(frozen=True)
class PdfAttempt:
    pdf_bytes: Optional[bytes] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.pdf_bytes is not None


@dataclass(frozen=True)
class GeneratedPdf:
    pdf_bytes: bytes
    source: str
    fallback_reason: Optional[str] = None


def attempt_template(record: Mapping[str, Any], options: Optional[TemplateOptions]) -> PdfAttempt:
    if options is None:
        return PdfAttempt(reason="No fillable PDF template path configured")
    try:
        return PdfAttempt(pdf_bytes=fill_template(record, options))
    except TemplateFillError as exc:
        return PdfAttempt(reason=str(exc))


def generate_application_pdf(
    record: Mapping[str, Any],
    template_options: Optional[TemplateOptions] = None,
    render_options: Optional[RenderOptions] = None,
) -> GeneratedPdf:
    """
    Produce the application PDF, preferring the fillable template.

    PdfRenderError from the layout renderer propagates; it is the only
    failure this function does not recover from.
    """
    attempt = attempt_template(record, template_options)
    if attempt.ok:
        return GeneratedPdf(pdf_bytes=attempt.pdf_bytes, source=SOURCE_TEMPLATE)

    logger.warning(
        "Template PDF unavailable, using layout renderer: %s",
        attempt.reason,
        extra={"application_id": (record or {}).get("id"), "pdf_source": SOURCE_LAYOUT},
    )
    pdf_bytes = render_application_pdf(record, render_options)
    return GeneratedPdf(pdf_bytes=pdf_bytes, source=SOURCE_LAYOUT, fallback_reason=attempt.reason)
