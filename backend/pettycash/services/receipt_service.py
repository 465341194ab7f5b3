"""Receipt (ticket) uploads for petty cash spends."""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from pettycash.core.config import get_settings
from pettycash.integrations import S3Client

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/png", "application/pdf"})
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class InvalidReceipt(ValueError):
    """Uploaded receipt has an unsupported type or size."""


@dataclass(slots=True)
class StoredReceipt:
    key: str
    url: str
    content_type: str
    size: int


def _safe_name(file_name: str | None) -> str:
    base = (file_name or "ticket").rsplit("/", 1)[-1].rsplit("\\", 1)[-1]
    cleaned = _UNSAFE_CHARS.sub("-", base).strip("-.")
    return cleaned or "ticket"


def build_ticket_key(
    *,
    organization_id: uuid.UUID,
    withdrawal_id: uuid.UUID,
    file_name: str | None,
    now: datetime | None = None,
) -> str:
    moment = now or datetime.now(UTC)
    stamp = int(moment.timestamp() * 1000)
    return (
        f"uploads/tickets/petty-cash/{organization_id}/{withdrawal_id}/"
        f"{stamp}-{_safe_name(file_name)}"
    )


def store_ticket(
    s3_client: S3Client,
    *,
    organization_id: uuid.UUID,
    withdrawal_id: uuid.UUID,
    file_name: str | None,
    content_type: str | None,
    data: bytes,
    now: datetime | None = None,
) -> StoredReceipt:
    """Validate and store a receipt, returning the URL to put on a spend."""

    if content_type not in ALLOWED_CONTENT_TYPES:
        raise InvalidReceipt("Only JPG, PNG or PDF receipts are accepted")
    if not data:
        raise InvalidReceipt("Receipt file is empty")
    max_bytes = get_settings().petty_cash_ticket_max_bytes
    if len(data) > max_bytes:
        raise InvalidReceipt(f"Receipt exceeds the {max_bytes} byte limit")

    key = build_ticket_key(
        organization_id=organization_id,
        withdrawal_id=withdrawal_id,
        file_name=file_name,
        now=now,
    )
    stored = s3_client.put_object(
        key,
        data,
        content_type=content_type,
        tags={"withdrawal_id": str(withdrawal_id)},
    )
    logger.info("Stored petty cash ticket %s (%s bytes)", key, stored.size)
    return StoredReceipt(
        key=stored.key,
        url=s3_client.build_object_url(stored.key),
        content_type=content_type,
        size=stored.size,
    )
