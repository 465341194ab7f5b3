"""Receipt storage and log scrubbing tests."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

import pytest

from pettycash.integrations import S3Client, S3ClientError
from pettycash.security.logging_filters import REDACTED, SensitiveFilter
from pettycash.services import receipt_service


def test_ticket_key_layout() -> None:
    org, withdrawal = uuid.uuid4(), uuid.uuid4()
    now = datetime(2024, 5, 4, 12, 0, tzinfo=UTC)

    key = receipt_service.build_ticket_key(
        organization_id=org,
        withdrawal_id=withdrawal,
        file_name="../../etc/passwd receipt.pdf",
        now=now,
    )

    stamp = int(now.timestamp() * 1000)
    assert key == f"uploads/tickets/petty-cash/{org}/{withdrawal}/{stamp}-passwd-receipt.pdf"


def test_store_ticket_validates_type_and_size(tmp_path) -> None:
    client = S3Client("receipts", root=tmp_path)
    kwargs = {"organization_id": uuid.uuid4(), "withdrawal_id": uuid.uuid4(), "file_name": "a.pdf"}

    with pytest.raises(receipt_service.InvalidReceipt):
        receipt_service.store_ticket(client, content_type="image/gif", data=b"GIF", **kwargs)
    with pytest.raises(receipt_service.InvalidReceipt):
        receipt_service.store_ticket(client, content_type="application/pdf", data=b"", **kwargs)

    stored = receipt_service.store_ticket(
        client, content_type="application/pdf", data=b"%PDF-1.4", **kwargs
    )
    assert stored.size == 8
    assert client.get_object_bytes(stored.key) == b"%PDF-1.4"
    assert stored.url == f"/receipts/{stored.key}"


def test_s3_client_rejects_traversal(tmp_path) -> None:
    client = S3Client("receipts", root=tmp_path, endpoint_url="https://files.example.com/")
    with pytest.raises(S3ClientError):
        client.put_object("../escape.png", b"x", content_type="image/png")
    assert client.build_object_url("a/b.png") == "https://files.example.com/receipts/a/b.png"


def test_sensitive_filter_scrubs_tokens() -> None:
    record = logging.LogRecord(
        "test", logging.INFO, __file__, 1,
        "headers: Authorization: Bearer abc.def.ghi body=%s",
        ('{"password": "hunter22"}',),
        None,
    )

    SensitiveFilter().filter(record)

    message = record.getMessage()
    assert "abc.def.ghi" not in message
    assert "hunter22" not in message
    assert REDACTED in message
