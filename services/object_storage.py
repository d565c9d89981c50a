"""S3 upload of generated application PDFs."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from settings import Settings, get_settings

logger = logging.getLogger(__name__)


def s3_configured(settings: Settings) -> bool:
    return bool(settings.s3_bucket_name and settings.aws_access_key_id and settings.aws_secret_access_key)


def _s3_client(settings: Settings):
    return boto3.client(
        "s3",
        region_name=settings.aws_region,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
    )


def upload_pdf(pdf_bytes: bytes, file_name: str, settings: Optional[Settings] = None, client=None) -> Dict[str, Any]:
    """
    Put a PDF into the configured bucket under s3_pdf_prefix.

    Returns {"status": "uploaded", "s3_key", "s3_bucket", "s3_url"},
    {"status": "skipped"} when S3 is not configured, or {"status": "failed"}.
    """
    settings = settings or get_settings()
    if client is None and not s3_configured(settings):
        return {"status": "skipped", "reason": "S3 not configured"}

    bucket = settings.s3_bucket_name
    key = f"{settings.s3_pdf_prefix}{file_name}"

    try:
        client = client or _s3_client(settings)
        client.put_object(
            Bucket=bucket,
            Key=key,
            Body=pdf_bytes,
            ContentType="application/pdf",
            Metadata={"uploaded-at": datetime.now(timezone.utc).isoformat()},
        )
    except (BotoCoreError, ClientError) as exc:
        logger.exception("S3 upload failed for %s", key)
        return {"status": "failed", "error": str(exc)}

    return {
        "status": "uploaded",
        "s3_key": key,
        "s3_bucket": bucket,
        "s3_url": f"https://{bucket}.s3.{settings.aws_region}.amazonaws.com/{key}",
    }
