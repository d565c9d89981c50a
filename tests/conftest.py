import io

import fitz
import pytest
from reportlab.pdfgen import canvas

from db import reset_engine
from services.pdf_layout import RenderOptions, render_application_pdf
from settings import Settings, reset_settings


# ------------------------------------------------------------------
# Application records
# ------------------------------------------------------------------

@pytest.fixture
def full_record():
    return {
        "id": "app-123",
        "legal_business_name": "Acme Holdings LLC",
        "business_dba": "Acme Coffee",
        "business_address": "100 Main Street",
        "business_city": "Atlanta",
        "business_state": "GA",
        "business_zip": "30301",
        "business_phone": "404-555-0100",
        "business_website": "acme.example.com",
        "industry": "Food Service",
        "first_name": "Jane",
        "last_name": "Doe",
        "contact_number": "404-555-0101",
        "email": "jane@acme.example.com",
        "legal_entity": "LLC",
        "business_tax_id": "12-3456789",
        "business_start_date": "2015-06-01",
        "credit_score": "700",
        "loan_amount": "$150,000",
        "funding_timeline": "30 days",
        "loan_use": "Equipment",
        "gross_annual_sales": "$1,200,000",
        "avg_monthly_deposits": "$100,000",
        "avg_daily_balance": "$25,000",
        "credit_card_processor": "Square",
        "has_other_financing": "no",
        "has_open_bankruptcies": "false",
        "has_judgements_liens": "0",
        "seasonal_business": "yes",
        "peak_months": ["June", "July", " "],
        "application_agreement": "on",
        "contact_agreement": "true",
        "owner_first_name": "Jane",
        "owner_last_name": "Owner",
        "owner_email": "owner@acme.example.com",
        "owner_ssn": "123-45-6789",
        "owner_dob": "1980-01-31",
        "owner_ownership": "100",
        "owner_address": "1 Owner Way",
        "owner_city": "Decatur",
        "owner_state": "GA",
        "owner_zip": "30030",
        "owner_contact": "404-555-0102",
        "signature": "Jane Owner",
        "application_date": "2024-03-15",
        "landlord_name_mortgage_company": "Peachtree Realty",
        "landlord_contact_person": "Sam Lee",
        "landlord_phone": "404-555-0103",
    }


@pytest.fixture
def maximal_record(full_record):
    record = {key: "W" * 400 for key in full_record}
    record["business_address"] = "Extremely long business address " * 20
    record["additional_owner_first_name"] = "A" * 200
    record["additional_owner_last_name"] = "B" * 200
    record["signature_additional"] = "S" * 300
    record["application_date_additional"] = "2024-03-16"
    return record


# ------------------------------------------------------------------
# PDFs
# ------------------------------------------------------------------

@pytest.fixture
def text_header_options():
    """Render options without a logo, so no SVG conversion is involved."""
    return RenderOptions(company_name="Acme Funding", logo_path=None)


@pytest.fixture
def fillable_template(tmp_path):
    path = tmp_path / "nolimitcap-empty-application.pdf"
    path.write_bytes(render_application_pdf({}, RenderOptions(logo_path=None, empty_fields=True, fillable=True)))
    return path


@pytest.fixture
def plain_pdf(tmp_path):
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer)
    c.drawString(72, 720, "No form fields here")
    c.showPage()
    c.save()
    path = tmp_path / "plain.pdf"
    path.write_bytes(buffer.getvalue())
    return path


@pytest.fixture
def empty_acroform_pdf(plain_pdf, tmp_path):
    """A PDF whose /AcroForm dictionary exists but lists no fields."""
    with fitz.open(plain_pdf) as doc:
        doc.xref_set_key(doc.pdf_catalog(), "AcroForm", "<</Fields[]>>")
        data = doc.tobytes()
    path = tmp_path / "empty-acroform.pdf"
    path.write_bytes(data)
    return path


@pytest.fixture
def encrypted_template(fillable_template, tmp_path):
    with fitz.open(fillable_template) as doc:
        data = doc.tobytes(encryption=fitz.PDF_ENCRYPT_AES_256, owner_pw="owner-secret", user_pw="user-secret")
    path = tmp_path / "encrypted-application.pdf"
    path.write_bytes(data)
    return path


# ------------------------------------------------------------------
# Settings
# ------------------------------------------------------------------

@pytest.fixture
def app_settings(tmp_path):
    settings = Settings(
        database_url=None,
        data_dir=tmp_path / "data",
        uploads_dir=tmp_path / "uploads",
        generated_pdf_dir=tmp_path / "generated-pdfs",
        pdf_template_path=tmp_path / "pdf_templates" / "nolimitcap-empty-application.pdf",
        logo_path=None,
        hubspot_access_token=None,
        aws_access_key_id=None,
        aws_secret_access_key=None,
        s3_bucket_name=None,
        smtp_host=None,
        funding_request_recipients="",
        log_level="WARNING",
    )
    reset_settings(settings)
    reset_engine()
    yield settings
    reset_settings(None)
    reset_engine()
