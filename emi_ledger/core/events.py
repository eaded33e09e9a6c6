"""Ledger event publication to sinks."""

from __future__ import annotations

import logging
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any, Protocol

from emi_ledger.models.base import Event
from emi_ledger.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


class Sink(Protocol):
    def write_batch(self, entity_type: str, records: list[Any]) -> None: ...

    def close(self) -> None: ...


class EventPublisher:
    """Buffer ledger events and hand them to sinks in batches.

    Parameters
    ----------
    sinks : list[Sink] | None
        Destinations for events. With no sinks, events are only kept in
        ``published``.
    topic : str
        Topic (or file stem) events are written under.
    source : str
        Value of ``Event.source``.
    autoflush : bool
        Write each event as soon as it is published.
    history : int | None
        How many recent events ``published`` keeps (``None`` keeps all).
    """

    def __init__(
        self,
        sinks: list[Sink] | None = None,
        topic: str = "medloan.ledger-events",
        source: str = "emi-ledger",
        autoflush: bool = False,
        history: int | None = 1000,
    ) -> None:
        self.sinks = list(sinks or [])
        self.topic = topic
        self.source = source
        self.autoflush = autoflush
        self.published: deque[Event] = deque(maxlen=history)
        self._pending: list[Event] = []

    def publish(self, event_type: str, subject: str, record: Any, **metadata: Any) -> Event:
        """Wrap a record in an ``Event`` envelope and queue it."""
        event = Event(
            event_id=str(uuid.uuid4()),
            event_type=event_type,
            event_time=datetime.now(timezone.utc),
            source=self.source,
            subject=subject,
            data=to_dict(record),
            metadata=metadata,
        )
        self.published.append(event)
        # Queued only when a sink will drain it
        if self.sinks:
            self._pending.append(event)
        logger.debug("Published %s for %s", event_type, subject)
        if self.autoflush:
            self.flush()
        return event

    def flush(self) -> int:
        """Write pending events to every sink. Returns the number written."""
        if not self._pending:
            return 0
        batch, self._pending = self._pending, []
        for sink in self.sinks:
            sink.write_batch(self.topic, batch)
        return len(batch)

    def close(self) -> None:
        self.flush()
        for sink in self.sinks:
            sink.close()
