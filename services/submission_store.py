"""
Persistence for contact submissions and funding applications.

Records go to the database when DATABASE_URL is configured. Without a
database, or when the insert fails, they are appended to JSON arrays under
data_dir so no submission is lost.
"""

import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from models import ContactSubmission, FundingApplication, PartnerSubmission, ProductRequest
from services.application_fields import BOOLEAN_APPLICATION_FIELDS
from services.exceptions import SubmissionStorageError
from settings import Settings
from utils.normalizers import normalize_value, to_boolean_field

logger = logging.getLogger(__name__)

CONTACTS_FILENAME = "contacts.json"
APPLICATIONS_FILENAME = "applications.json"

# form value -> (model, table name)
CONTACT_MODELS = {
    "partner": (PartnerSubmission, "partners"),
    "product-request": (ProductRequest, "product_requests"),
    "contact": (ContactSubmission, "contacts"),
}

# Read-modify-write on the JSON files must not interleave
_json_lock = threading.Lock()


def ensure_data_storage(settings: Settings) -> None:
    """Create the storage directories and seed empty JSON arrays."""
    for directory in (settings.data_dir, settings.uploads_dir, settings.generated_pdf_dir):
        Path(directory).mkdir(parents=True, exist_ok=True)
    if settings.pdf_template_path:
        Path(settings.pdf_template_path).parent.mkdir(parents=True, exist_ok=True)

    for filename in (CONTACTS_FILENAME, APPLICATIONS_FILENAME):
        path = Path(settings.data_dir) / filename
        if not path.exists():
            path.write_text("[]", encoding="utf-8")


def _set_aside(path: Path) -> Path:
    """Rename an unreadable store so the next write does not replace it."""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    target = path.with_name(f"{path.name}.corrupt-{stamp}")
    os.replace(path, target)
    return target


def read_json_array(path: Path) -> List[Dict[str, Any]]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    try:
        parsed = json.loads(raw or "[]")
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, list):
        return parsed

    moved = _set_aside(path)
    logger.warning("JSON store %s is not a readable array, moved to %s", path, moved.name)
    return []


def write_json_array(path: Path, records: List[Dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(records, handle, indent=2, default=str)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _parse_timestamp(value: Any) -> Optional[datetime]:
    text = normalize_value(value)
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None


def _crm_code(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _model_kwargs(model, record: Dict[str, Any]) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {}
    for column in model.__table__.columns:
        key = column.key
        if key == "created_at":
            created_at = _parse_timestamp(record.get("created_at"))
            if created_at is not None:
                kwargs[key] = created_at
        elif key == "updated_at":
            continue
        elif key == "crm_code":
            kwargs[key] = _crm_code(record.get(key))
        elif key == "files":
            files = record.get("files")
            kwargs[key] = files if isinstance(files, list) else []
        elif key in BOOLEAN_APPLICATION_FIELDS:
            kwargs[key] = to_boolean_field(record.get(key))
        elif key in ("crm_status", "pdf_status", "email_status"):
            kwargs[key] = normalize_value(record.get(key)) or "pending"
        else:
            value = normalize_value(record.get(key))
            kwargs[key] = value or None
    return kwargs


class SubmissionStore:
    def __init__(self, data_dir: Path, session_factory: Optional[sessionmaker] = None):
        self.data_dir = Path(data_dir)
        self.session_factory = session_factory

    @property
    def contacts_file(self) -> Path:
        return self.data_dir / CONTACTS_FILENAME

    @property
    def applications_file(self) -> Path:
        return self.data_dir / APPLICATIONS_FILENAME

    def _save_model(self, model, record: Dict[str, Any]) -> Dict[str, Any]:
        if self.session_factory is None:
            return {"status": "skipped", "reason": "Database not configured"}

        db = self.session_factory()
        try:
            db.add(model(**_model_kwargs(model, record)))
            db.commit()
            return {"status": "saved"}
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Database save failed for %s %s", model.__tablename__, record.get("id"))
            return {"status": "failed", "error": str(exc)}
        finally:
            db.close()

    def _append_json(self, path: Path, record: Dict[str, Any]) -> None:
        with _json_lock:
            try:
                records = read_json_array(path)
                records.append(record)
                write_json_array(path, records)
            except OSError as exc:
                raise SubmissionStorageError(f"Failed to store submission in {path.name}: {exc}") from exc

    def save_contact(self, record: Dict[str, Any], form_type: str = "contact") -> Dict[str, Any]:
        """
        Store a contact, partner or product-request submission.

        Returns {"storage": "database", "table": ...} or {"storage": "local"}.
        Raises SubmissionStorageError when the JSON fallback cannot be written.
        """
        model, table = CONTACT_MODELS.get(form_type, CONTACT_MODELS["contact"])
        result = self._save_model(model, record)
        if result["status"] == "saved":
            return {"storage": "database", "table": table}

        self._append_json(self.contacts_file, record)
        return {"storage": "local"}

    def save_application(self, record: Dict[str, Any]) -> Dict[str, Any]:
        result = self._save_model(FundingApplication, record)
        if result["status"] == "saved":
            return {"storage": "database", "table": FundingApplication.__tablename__}

        if result["status"] == "failed":
            logger.warning(
                "Application %s saved to local JSON after database failure",
                record.get("id"),
                extra={"application_id": record.get("id"), "storage": "local"},
            )
        self._append_json(self.applications_file, record)
        return {"storage": "local"}

    def list_applications(self) -> List[Dict[str, Any]]:
        with _json_lock:
            return read_json_array(self.applications_file)

    def list_contacts(self) -> List[Dict[str, Any]]:
        with _json_lock:
            return read_json_array(self.contacts_file)
