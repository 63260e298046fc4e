"""Audit-trail persistence."""

from eventfund.persistence.event_log import EventKind, EventLog, EventRecord

__all__ = ["EventKind", "EventLog", "EventRecord"]
