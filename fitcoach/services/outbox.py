"""
Outbound notification queue.

Domain code appends notification intents after its own commit; a separate
drain step persists them and pushes them to connected clients. Nothing in
here may raise into the caller: a lost notification is logged, never
surfaced as a failure of the write that produced it.
"""
import logging
import queue
from datetime import datetime

logger = logging.getLogger(__name__)


class NotificationIntent:
    __slots__ = ("recipient_id", "sender_id", "type", "title", "message",
                 "entity_type", "entity_id", "extra", "created_at")

    def __init__(self, recipient_id, title, message, type="info", sender_id=None,
                 entity_type=None, entity_id=None, extra=None):
        self.recipient_id = recipient_id
        self.sender_id = sender_id
        self.type = type
        self.title = title
        self.message = message
        self.entity_type = entity_type
        self.entity_id = None if entity_id is None else str(entity_id)
        self.extra = extra or {}
        self.created_at = datetime.utcnow()

    def __repr__(self):
        return f"<NotificationIntent {self.type} -> {self.recipient_id}>"


class NotificationOutbox:
    def __init__(self, app=None):
        self._queue = queue.Queue()
        self._sink = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app, sink=None):
        app.extensions["notification_outbox"] = self
        if sink is not None:
            self._sink = sink

    def set_sink(self, sink):
        """``sink(intents)`` persists and delivers a batch of intents."""
        self._sink = sink

    def emit(self, intent):
        try:
            self._queue.put_nowait(intent)
        except Exception as e:
            logger.warning(f"Dropping notification {intent!r}: {e}")

    def emit_many(self, intents):
        for intent in intents:
            self.emit(intent)

    def pending(self):
        return self._queue.qsize()

    def _take_all(self):
        batch = []
        while True:
            try:
                batch.append(self._queue.get_nowait())
            except queue.Empty:
                return batch

    def drain(self):
        """Hand every queued intent to the sink. Returns how many were delivered."""
        batch = self._take_all()
        if not batch:
            return 0
        if self._sink is None:
            logger.warning(f"No notification sink configured, dropping {len(batch)} intent(s)")
            return 0
        try:
            delivered = self._sink(batch)
        except Exception as e:
            logger.error(f"Notification drain failed for {len(batch)} intent(s): {type(e).__name__}: {e}")
            return 0
        return len(batch) if delivered is None else len(delivered)

    def clear(self):
        self._take_all()
