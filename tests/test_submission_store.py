import json
import threading

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import services.submission_store as submission_store
from db import Base
from models import ContactSubmission, FundingApplication, PartnerSubmission
from services.exceptions import SubmissionStorageError
from services.submission_store import SubmissionStore, ensure_data_storage


@pytest.fixture
def sqlite_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'store.db'}", future=True)
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    engine.dispose()


@pytest.fixture
def contact_record():
    return {
        "id": "c-1",
        "created_at": "2024-03-15T10:00:00.000Z",
        "name": "Jane Doe",
        "email": "jane@acme.example.com",
        "company": "Acme",
        "partner_type": "ISO",
        "crm_status": "skipped",
    }


# ---------------------------------------------------------------------------
# Local JSON fallback
# ---------------------------------------------------------------------------

def test_ensure_data_storage_seeds_json_arrays(app_settings):
    ensure_data_storage(app_settings)

    for name in ("contacts.json", "applications.json"):
        path = app_settings.data_dir / name
        assert json.loads(path.read_text()) == []
    assert app_settings.uploads_dir.is_dir()
    assert app_settings.generated_pdf_dir.is_dir()


def test_contact_saved_locally_without_database(tmp_path, contact_record):
    store = SubmissionStore(tmp_path)

    assert store.save_contact(contact_record, "partner") == {"storage": "local"}
    assert store.list_contacts() == [contact_record]


def test_application_saved_locally_without_database(tmp_path, full_record):
    store = SubmissionStore(tmp_path)

    assert store.save_application(full_record) == {"storage": "local"}
    saved = store.list_applications()
    assert saved[0]["legal_business_name"] == "Acme Holdings LLC"


def test_unreadable_json_store_is_kept_aside(tmp_path, contact_record):
    (tmp_path / "contacts.json").write_text("{not json")
    store = SubmissionStore(tmp_path)

    store.save_contact(contact_record)
    assert store.list_contacts() == [contact_record]

    kept = list(tmp_path.glob("contacts.json.corrupt-*"))
    assert len(kept) == 1
    assert kept[0].read_text() == "{not json"


def test_non_array_json_store_is_kept_aside(tmp_path, contact_record):
    (tmp_path / "contacts.json").write_text('{"id": "old"}')
    SubmissionStore(tmp_path).save_contact(contact_record)

    assert len(list(tmp_path.glob("contacts.json.corrupt-*"))) == 1


def test_failed_write_leaves_previous_file_intact(monkeypatch, tmp_path, contact_record):
    path = tmp_path / "contacts.json"
    submission_store.write_json_array(path, [contact_record])

    def failing_dump(records, handle, **kwargs):
        handle.write("[{")
        raise OSError("disk full")

    monkeypatch.setattr(submission_store.json, "dump", failing_dump)

    with pytest.raises(OSError):
        submission_store.write_json_array(path, [contact_record, contact_record])

    assert json.loads(path.read_text()) == [contact_record]
    assert [p.name for p in tmp_path.iterdir()] == ["contacts.json"]


def test_concurrent_appends_are_not_lost(tmp_path):
    store = SubmissionStore(tmp_path)
    threads = [
        threading.Thread(target=store.save_contact, args=({"id": str(i), "name": "n", "email": "e"},))
        for i in range(20)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(int(record["id"]) for record in store.list_contacts()) == list(range(20))


def test_write_failure_raises_storage_error(monkeypatch, tmp_path, contact_record):
    def failing_write(path, records):
        raise OSError("disk full")

    monkeypatch.setattr(submission_store, "write_json_array", failing_write)

    with pytest.raises(SubmissionStorageError):
        SubmissionStore(tmp_path).save_contact(contact_record)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

def test_contact_routed_by_form_type(tmp_path, sqlite_factory, contact_record):
    store = SubmissionStore(tmp_path, sqlite_factory)

    result = store.save_contact(contact_record, "partner")

    assert result == {"storage": "database", "table": "partners"}
    with sqlite_factory() as db:
        partner = db.get(PartnerSubmission, "c-1")
        assert partner.partner_type == "ISO"
        assert partner.crm_status == "skipped"
        assert db.query(ContactSubmission).count() == 0
    assert not store.contacts_file.exists()


def test_application_saved_to_database(tmp_path, sqlite_factory, full_record):
    full_record["files"] = [{"original_name": "jan.pdf", "stored_name": "1-jan.pdf", "size": 10}]
    full_record["crm_code"] = "201"
    store = SubmissionStore(tmp_path, sqlite_factory)

    result = store.save_application(full_record)

    assert result["storage"] == "database"
    with sqlite_factory() as db:
        row = db.get(FundingApplication, "app-123")
        assert row.legal_business_name == "Acme Holdings LLC"
        assert row.application_agreement is True
        assert row.contact_agreement is True
        assert row.peak_months == "June, July"
        assert row.files[0]["original_name"] == "jan.pdf"
        assert row.crm_code == 201
        assert row.pdf_status == "pending"


def test_database_error_falls_back_to_json(tmp_path, contact_record):
    # no tables created, so the insert fails
    engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}", future=True)
    factory = sessionmaker(bind=engine, future=True)
    store = SubmissionStore(tmp_path, factory)

    assert store.save_contact(contact_record) == {"storage": "local"}
    assert store.list_contacts() == [contact_record]
    engine.dispose()
