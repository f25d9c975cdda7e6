"""The per-business link to the upstream platform."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .entity import Entity, utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from .enums import SyncStatus


@dataclass(eq=False, kw_only=True)
class Connection(Entity):
    """Credentials and sync bookkeeping for one business. At most one per business."""

    business_id: UUID
    shop: str
    access_token: str
    scopes: list[str] = field(default_factory=list)
    webhook_ids: set[str] = field(default_factory=set)
    last_sync_at: datetime | None = None
    last_sync_status: SyncStatus | None = None
    created_at: datetime = field(default_factory=utcnow)

    def overwrite_credentials(self, *, shop: str, access_token: str, scopes: Iterable[str]) -> None:
        self.shop = shop
        self.access_token = access_token
        self.scopes = list(scopes)

    def record_sync(self, status: SyncStatus, *, now: datetime) -> None:
        self.last_sync_at = now
        self.last_sync_status = status

    def replace_webhook_ids(self, ids: Iterable[str]) -> None:
        # reassign so the mapped column sees a new value
        self.webhook_ids = set(ids)
