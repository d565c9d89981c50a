"""
Field catalogue for submissions and funding applications.
"""

# Fields kept from contact / partner / product-request forms
CONTACT_FIELDS = (
    "name", "email", "company", "revenue", "needs", "role", "note", "details", "product", "form", "page",
    "phone", "contact_time", "partner_type", "pipeline_size",
)

APPLICATION_FIELDS = (
    "loan_amount", "funding_timeline", "loan_use",
    "first_name", "last_name", "contact_number", "email", "contact_agreement",
    "legal_business_name", "business_start_date", "business_dba", "industry", "business_website",
    "business_address", "business_city", "business_state", "business_zip", "business_phone",
    "legal_entity", "business_tax_id", "credit_score", "gross_annual_sales", "avg_monthly_deposits",
    "avg_daily_balance", "state_of_incorporation", "funding_company", "credit_card_processor",
    "seasonal_business", "peak_months", "has_other_financing", "outstanding_balance",
    "has_judgements_liens", "has_open_bankruptcies",
    "owner_first_name", "owner_last_name", "owner_email", "owner_address", "owner_city",
    "owner_state", "owner_zip", "owner_contact", "owner_dob", "owner_ssn", "owner_ownership",
    "additional_owner_first_name", "additional_owner_last_name", "additional_owner_email",
    "additional_owner_address", "additional_owner_city", "additional_owner_state",
    "additional_owner_zip", "additional_owner_contact", "additional_owner_dob",
    "additional_owner_ssn", "additional_owner_ownership",
    "signature", "signature_additional", "application_date", "application_date_additional",
    "landlord_name_mortgage_company", "landlord_contact_person", "landlord_phone",
    "business_trade_reference_2", "business_trade_reference_2_contact_person", "business_trade_reference_2_phone",
    "business_trade_reference_3", "business_trade_reference_3_contact_person", "business_trade_reference_3_phone",
    "application_agreement", "form", "page",
)

# Agreement flags stored as booleans
BOOLEAN_APPLICATION_FIELDS = frozenset({"contact_agreement", "application_agreement"})

REQUIRED_FIELDS = frozenset({
    "loan_amount",
    "funding_timeline",
    "first_name",
    "last_name",
    "contact_number",
    "email",
    "contact_agreement",
    "legal_business_name",
    "business_start_date",
    "business_dba",
    "industry",
    "business_address",
    "business_city",
    "business_state",
    "business_zip",
    "business_phone",
    "legal_entity",
    "business_tax_id",
    "credit_score",
    "gross_annual_sales",
    "avg_monthly_deposits",
    "avg_daily_balance",
    "state_of_incorporation",
    "has_other_financing",
    "has_judgements_liens",
    "has_open_bankruptcies",
    "seasonal_business",
    "owner_first_name",
    "owner_last_name",
    "owner_email",
    "owner_address",
    "owner_city",
    "owner_state",
    "owner_zip",
    "owner_contact",
    "owner_dob",
    "owner_ssn",
    "owner_ownership",
    "signature",
    "application_date",
    "application_agreement",
})

# Submission fields the API insists on before accepting a request
REQUIRED_CONTACT_INPUT = ("name", "email")
REQUIRED_APPLICATION_INPUT = ("first_name", "last_name", "email")


def is_required(field_key: str) -> bool:
    return field_key in REQUIRED_FIELDS


def mark_label(field_key: str, label: str, force_required: bool = False) -> str:
    """Append the required marker to a label when the field is required."""
    if force_required or is_required(field_key):
        return f"{label} *"
    return label
