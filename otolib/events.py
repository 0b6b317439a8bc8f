from __future__ import annotations

import threading
from typing import Any, Callable

TIMING_CHANGED = "timing.changed"
SELECTION_CHANGED = "selection.changed"

Handler = Callable[..., Any]


class EventBus:
    """Notification bus shared by every view of a voicebank.

    Two event types travel on it:

    * ``timing.changed`` with ``external_origin`` and ``sample``.  Editors
      publish it with ``external_origin=False`` after each local edit;
      another view that rewrote the catalog publishes it with ``True`` so
      open editors reload.
    * ``selection.changed`` with ``sample``, asking every editor that holds
      that record to jump to it.

    Handlers run synchronously on the publishing thread.  The handler
    table is guarded by a lock, and a snapshot is taken before dispatch so
    handlers may subscribe or unsubscribe while being called.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: str, handler: Handler) -> Callable[[], None]:
        """Register *handler*.  Returns a callable that unsubscribes it."""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
        return lambda: self.unsubscribe(event_type, handler)

    def unsubscribe(self, event_type: str, handler: Handler) -> None:
        with self._lock:
            handlers = self._handlers.get(event_type)
            if handlers and handler in handlers:
                handlers.remove(handler)
                if not handlers:
                    del self._handlers[event_type]

    def emit(self, event_type: str, **data: Any) -> None:
        with self._lock:
            snapshot = tuple(self._handlers.get(event_type, ()))
        for handler in snapshot:
            handler(**data)

    # ── Typed publishers ───────────────────────────────────────────────────

    def publish_timing(self, sample: Any, *, external_origin: bool = False) -> None:
        self.emit(TIMING_CHANGED, external_origin=external_origin, sample=sample)

    def publish_selection(self, sample: Any) -> None:
        self.emit(SELECTION_CHANGED, sample=sample)
