from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    app_name: str = "nolimitcap-backend"
    host: str = "0.0.0.0"
    port: int = 5050
    log_level: str = "INFO"
    cors_origin: str = "*"

    database_url: str | None = None

    data_dir: Path = BASE_DIR / "data"
    uploads_dir: Path = BASE_DIR / "uploads"
    generated_pdf_dir: Path = BASE_DIR / "generated-pdfs"
    pdf_template_path: Path | None = BASE_DIR / "pdf_templates" / "nolimitcap-empty-application.pdf"
    logo_path: Path | None = BASE_DIR / "assets" / "images" / "logo.svg"

    company_name: str = "No Limit Capital"
    pdf_margin: float = 24
    pdf_header_scale: float = 0.75

    hubspot_access_token: str | None = Field(default=None, alias="HUBSPOT_ACCESS_TOKEN")
    hubspot_timeout: int = 10

    aws_region: str = "us-east-1"
    aws_access_key_id: str | None = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: str | None = Field(default=None, alias="AWS_SECRET_ACCESS_KEY")
    s3_bucket_name: str | None = None
    s3_pdf_prefix: str = "applications/pdfs/"

    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_from_email: str = "no-reply@nolimitcap.com"
    smtp_from_name: str = "No Limit Capital"
    funding_request_recipients: str = ""

    max_upload_files: int = 10
    max_upload_bytes: int = 80 * 1024 * 1024

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def recipients(self) -> list[str]:
        return [value.strip() for value in self.funding_request_recipients.split(",") if value.strip()]


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings(settings: Settings | None = None) -> None:
    """Replace (or drop) the cached settings; used by tests and scripts."""
    global _settings
    _settings = settings
