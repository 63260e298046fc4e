"""Append-only event log — the audit trail of every campaign state change.

Each mutation of a campaign (creation, contribution, funding, expiry,
close, settlement leg, pool seeding, cap lock) appends one immutable
record. Records carry a SHA-256 hash of their canonical JSON form so a
persisted log can be verified on load.

The log is an audit trail, not the source of campaign state: the registry
holds state in memory and writes here after each change.
"""

from __future__ import annotations

import enum
import hashlib
import json
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


class EventKind(str, enum.Enum):
    """Classification of campaign events."""
    CAMPAIGN_CREATED = "campaign_created"
    CONTRIBUTION_RECORDED = "contribution_recorded"
    CAMPAIGN_FUNDED = "campaign_funded"
    CAMPAIGN_EXPIRED = "campaign_expired"
    CAMPAIGN_CLOSED = "campaign_closed"
    # Settlement legs
    PAYOUT_SETTLED = "payout_settled"
    REFUND_ISSUED = "refund_issued"
    TRANSFER_FAILED = "transfer_failed"
    # Receipt token and pool
    TOKEN_CAP_LOCKED = "token_cap_locked"
    POOL_SEEDED = "pool_seeded"
    LIQUIDITY_FAILED = "liquidity_failed"


def _canonical_digest(
    event_id: str,
    event_kind: str,
    timestamp_utc: str,
    campaign_id: int,
    payload: dict[str, Any],
) -> str:
    canonical = json.dumps(
        {
            "event_id": event_id,
            "event_kind": event_kind,
            "timestamp_utc": timestamp_utc,
            "campaign_id": campaign_id,
            "payload": payload,
        },
        sort_keys=True,
        ensure_ascii=False,
    ).encode("utf-8")
    return f"sha256:{hashlib.sha256(canonical).hexdigest()}"


@dataclass(frozen=True)
class EventRecord:
    """A single immutable campaign event."""
    event_id: str
    event_kind: EventKind
    timestamp_utc: str
    campaign_id: int
    payload: dict[str, Any]
    event_hash: str

    @staticmethod
    def create(
        event_id: str,
        event_kind: EventKind,
        campaign_id: int,
        payload: dict[str, Any],
        timestamp_utc: Optional[datetime] = None,
    ) -> EventRecord:
        """Create a new event record with computed hash."""
        ts = timestamp_utc or datetime.now(timezone.utc)
        ts_str = ts.strftime("%Y-%m-%dT%H:%M:%SZ")
        return EventRecord(
            event_id=event_id,
            event_kind=event_kind,
            timestamp_utc=ts_str,
            campaign_id=campaign_id,
            payload=payload,
            event_hash=_canonical_digest(
                event_id, event_kind.value, ts_str, campaign_id, payload
            ),
        )


class EventLog:
    """Append-only event log with optional JSONL persistence.

    Events can only be appended. A log backed by a file is reloaded and
    verified on construction; tampered lines or replayed ids fail closed.
    """

    def __init__(self, storage_path: Optional[Path] = None) -> None:
        self._events: list[EventRecord] = []
        self._event_ids: set[str] = set()
        self._storage_path = storage_path
        self._lock = threading.Lock()

        if storage_path and storage_path.exists():
            self._load_from_file(storage_path)

    def append(self, event: EventRecord) -> None:
        """Append an event. Raises ValueError on a duplicate event_id."""
        with self._lock:
            if event.event_id in self._event_ids:
                raise ValueError(f"Duplicate event ID: {event.event_id}")
            self._events.append(event)
            self._event_ids.add(event.event_id)
            if self._storage_path:
                self._append_to_file(event)

    def events(
        self,
        kind: Optional[EventKind] = None,
        campaign_id: Optional[int] = None,
    ) -> list[EventRecord]:
        result = list(self._events)
        if kind is not None:
            result = [e for e in result if e.event_kind == kind]
        if campaign_id is not None:
            result = [e for e in result if e.campaign_id == campaign_id]
        return result

    @property
    def count(self) -> int:
        return len(self._events)

    @property
    def last_event(self) -> Optional[EventRecord]:
        return self._events[-1] if self._events else None

    def _append_to_file(self, event: EventRecord) -> None:
        record = {
            "event_id": event.event_id,
            "event_kind": event.event_kind.value,
            "timestamp_utc": event.timestamp_utc,
            "campaign_id": event.campaign_id,
            "payload": event.payload,
            "event_hash": event.event_hash,
        }
        with self._storage_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, sort_keys=True, ensure_ascii=False) + "\n")

    def _load_from_file(self, path: Path) -> None:
        with path.open("r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                data = json.loads(line)
                event_id = data["event_id"]

                if event_id in self._event_ids:
                    raise ValueError(
                        f"Duplicate event ID on recovery (line {line_num}): {event_id}"
                    )

                expected_hash = _canonical_digest(
                    event_id,
                    data["event_kind"],
                    data["timestamp_utc"],
                    data["campaign_id"],
                    data["payload"],
                )
                if data["event_hash"] != expected_hash:
                    raise ValueError(
                        f"Integrity check failed (line {line_num}): event {event_id} "
                        f"stored hash {data['event_hash']} != computed {expected_hash}"
                    )

                self._events.append(EventRecord(
                    event_id=event_id,
                    event_kind=EventKind(data["event_kind"]),
                    timestamp_utc=data["timestamp_utc"],
                    campaign_id=data["campaign_id"],
                    payload=data["payload"],
                    event_hash=data["event_hash"],
                ))
                self._event_ids.add(event_id)
