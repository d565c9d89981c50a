# models.py
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Text,
    Integer,
    DateTime,
    Boolean,
    JSON,
    Index,
)

from db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class SubmissionStatusMixin:
    crm_status = Column(Text, nullable=False, default="pending")
    crm_code = Column(Integer, nullable=True)
    crm_provider = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class ContactSubmission(SubmissionStatusMixin, Base):
    __tablename__ = "contacts"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, index=True)
    phone = Column(Text)
    company = Column(Text)
    contact_time = Column(Text)
    details = Column(Text)


class PartnerSubmission(SubmissionStatusMixin, Base):
    __tablename__ = "partners"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, index=True)
    company = Column(Text)
    partner_type = Column(Text)
    pipeline_size = Column(Text)


class ProductRequest(SubmissionStatusMixin, Base):
    __tablename__ = "product_requests"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, index=True)
    product = Column(Text)


class FundingApplication(SubmissionStatusMixin, Base):
    __tablename__ = "applications"

    id = Column(Text, primary_key=True)

    # Basic info
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    contact_number = Column(Text)
    contact_agreement = Column(Boolean, nullable=False, default=False)

    # Loan details
    loan_amount = Column(Text)
    funding_timeline = Column(Text)
    loan_use = Column(Text)

    # Business information
    legal_business_name = Column(Text)
    business_start_date = Column(Text)
    business_dba = Column(Text)
    industry = Column(Text)
    business_website = Column(Text)
    business_address = Column(Text)
    business_city = Column(Text)
    business_state = Column(Text)
    business_zip = Column(Text)
    business_phone = Column(Text)
    legal_entity = Column(Text)
    business_tax_id = Column(Text)
    credit_score = Column(Text)
    gross_annual_sales = Column(Text)
    avg_monthly_deposits = Column(Text)
    avg_daily_balance = Column(Text)
    state_of_incorporation = Column(Text)
    funding_company = Column(Text)
    credit_card_processor = Column(Text)
    seasonal_business = Column(Text)
    peak_months = Column(Text)
    has_other_financing = Column(Text)
    outstanding_balance = Column(Text)
    has_judgements_liens = Column(Text)
    has_open_bankruptcies = Column(Text)

    # Primary owner
    owner_first_name = Column(Text)
    owner_last_name = Column(Text)
    owner_email = Column(Text, index=True)
    owner_address = Column(Text)
    owner_city = Column(Text)
    owner_state = Column(Text)
    owner_zip = Column(Text)
    owner_contact = Column(Text)
    owner_dob = Column(Text)
    owner_ssn = Column(Text)
    owner_ownership = Column(Text)

    # Additional owner
    additional_owner_first_name = Column(Text)
    additional_owner_last_name = Column(Text)
    additional_owner_email = Column(Text)
    additional_owner_address = Column(Text)
    additional_owner_city = Column(Text)
    additional_owner_state = Column(Text)
    additional_owner_zip = Column(Text)
    additional_owner_contact = Column(Text)
    additional_owner_dob = Column(Text)
    additional_owner_ssn = Column(Text)
    additional_owner_ownership = Column(Text)

    # References
    landlord_name_mortgage_company = Column(Text)
    landlord_contact_person = Column(Text)
    landlord_phone = Column(Text)
    business_trade_reference_2 = Column(Text)
    business_trade_reference_2_contact_person = Column(Text)
    business_trade_reference_2_phone = Column(Text)
    business_trade_reference_3 = Column(Text)
    business_trade_reference_3_contact_person = Column(Text)
    business_trade_reference_3_phone = Column(Text)

    # Authorization
    signature = Column(Text)
    signature_additional = Column(Text)
    application_date = Column(Text)
    application_date_additional = Column(Text)
    application_agreement = Column(Boolean, nullable=False, default=False)

    # Request metadata
    form = Column(Text)
    page = Column(Text)

    files = Column(JSON, nullable=False, default=list)

    generated_pdf_url = Column(Text)
    generated_pdf_filename = Column(Text)
    pdf_source = Column(Text)
    pdf_status = Column(Text, nullable=False, default="pending")
    pdf_error = Column(Text)
    email_status = Column(Text, nullable=False, default="pending")
    email_message_id = Column(Text)

    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        Index("idx_applications_email", "email"),
        Index("idx_applications_created_at", "created_at"),
    )
