import re

import pytest

from rentflow.core import attachments
from rentflow.core.attachments import create_with_file, update_with_file
from rentflow.core.errors import GatewayError
from rentflow.core.storage import FilePayload, object_path
from rentflow.models.document import Document


def test_object_path_layout():
    payload = FilePayload("Lease Agreement.PDF", "application/pdf", b"x")
    assert re.fullmatch(r"t-1/\d{13}\.pdf", object_path("t-1", payload))
    assert re.fullmatch(r"t-1/\d{13}-2\.pdf", object_path("t-1", payload, index=2))


def test_extension_guessed_from_content_type():
    assert FilePayload("blob", "image/png", b"x").extension == "png"


def test_upload_many_keeps_going_after_a_failure(storage):
    payloads = [
        FilePayload("a.pdf", "application/pdf", b"a"),
        FilePayload("b.pdf", "application/pdf", b"b"),
        FilePayload("c.pdf", "application/pdf", b"c"),
    ]
    storage.fail_data.add(b"b")

    urls, warnings = storage.upload_many("tenant-documents", "t-1", payloads)

    assert urls[1] is None
    assert all(u and "/tenant-documents/t-1/" in u for u in (urls[0], urls[2]))
    assert warnings == ["Could not upload b.pdf: Storage error 500: upload rejected"]
    assert len(storage.objects) == 2


def test_path_from_public_url(storage):
    url = storage.public_url("general-documents", "d-1/1700000000000.pdf")
    assert storage.path_from_public_url("general-documents", url) == "d-1/1700000000000.pdf"
    assert storage.path_from_public_url("other-bucket", url) is None
    assert storage.path_from_public_url("general-documents", "https://placehold.co/80x80.png") is None
    assert storage.path_from_public_url("general-documents", None) is None


def test_discard_ignores_foreign_urls(storage):
    assert storage.discard("rentflow-public", ["https://placehold.co/80x80.png", None]) == []
    assert storage.removed == []


def test_upload_file_stores_object_under_entity_layout(storage):
    url = storage.upload_file("tenant-documents", "t-1", FilePayload("Lease.PDF", "application/pdf", b"lease"), index=0)

    assert re.fullmatch(
        r"https://project\.supabase\.co/storage/v1/object/public/tenant-documents/t-1/\d{13}-0\.pdf", url
    )
    (key,) = storage.objects
    assert key == ("tenant-documents", storage.path_from_public_url("tenant-documents", url))


def test_update_with_file_discards_new_object_when_write_fails(db, storage, monkeypatch):
    document = create_with_file(
        db, storage, Document, {"category": "Lease"}, "general-documents", "file_url",
        FilePayload("old.pdf", "application/pdf", b"old"),
    )
    old_key = ("general-documents", storage.path_from_public_url("general-documents", document.file_url))

    def failing_update(db, obj, data):
        raise GatewayError("Database error 500: write rejected")

    monkeypatch.setattr(attachments, "update_record", failing_update)
    with pytest.raises(GatewayError):
        update_with_file(
            db, storage, document, {"category": "Lease"}, "general-documents", "file_url",
            FilePayload("new.pdf", "application/pdf", b"new"),
        )

    assert list(storage.objects) == [old_key]
    assert len(storage.removed) == 1
