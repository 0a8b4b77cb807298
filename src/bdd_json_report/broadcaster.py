"""Synchronous in-process event broadcaster."""
from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from bdd_json_report.models import Event

Listener = Callable[[Event], None]


class EventBroadcaster:
    """Delivers each emitted event to every registered listener.

    Dispatch is synchronous and ordered: listeners run in registration order
    on the emitting thread, wildcard listeners interleaved with type-specific
    ones exactly as they were registered. A listener exception propagates to
    the caller of ``emit``.
    """

    def __init__(self) -> None:
        self._listeners: List[Tuple[Optional[str], Listener]] = []

    def on(self, event_type: str, listener: Listener) -> None:
        """Register *listener* for events of *event_type*."""
        self._listeners.append((event_type, listener))

    def on_any(self, listener: Listener) -> None:
        """Register *listener* for every event."""
        self._listeners.append((None, listener))

    def emit(self, event: Event) -> None:
        for event_type, listener in list(self._listeners):
            if event_type is None or event_type == event.event_type:
                listener(event)

    def listener_counts(self) -> Dict[str, int]:
        """Number of listeners per event type (``"*"`` for wildcard)."""
        counts: Dict[str, int] = {}
        for event_type, _ in self._listeners:
            key = event_type or "*"
            counts[key] = counts.get(key, 0) + 1
        return counts
