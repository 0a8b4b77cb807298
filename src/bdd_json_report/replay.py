"""Replay a recorded event stream into a JSON report.

Pure helpers: every call wires a fresh broadcaster, collector and formatter,
so nothing leaks between runs.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

from bdd_json_report.broadcaster import EventBroadcaster
from bdd_json_report.collector import EventDataCollector
from bdd_json_report.execution import TEST_RUN_FINISHED
from bdd_json_report.formatter import FormatterOptions, JsonFormatter
from bdd_json_report.models import Event


def render_events(
    events: Sequence[Event],
    options: Optional[FormatterOptions] = None,
) -> str:
    """Emit *events* in order and return the report text that was written.

    A TestRunFinished event is appended when the stream has none; events
    after the first TestRunFinished are still delivered to the collector
    but do not trigger another report.
    """
    broadcaster = EventBroadcaster()
    collector = EventDataCollector(broadcaster)
    written: List[str] = []
    JsonFormatter(broadcaster, collector, written.append, options)

    finished = False
    for event in events:
        if event.event_type == TEST_RUN_FINISHED:
            if finished:
                continue
            finished = True
        broadcaster.emit(event)
    if not finished:
        broadcaster.emit(Event(event_type=TEST_RUN_FINISHED))

    return "".join(written)


def replay_events(
    events: Sequence[Event],
    options: Optional[FormatterOptions] = None,
) -> List[Dict[str, Any]]:
    """Emit *events* in order and return the parsed report document."""
    document: List[Dict[str, Any]] = json.loads(render_events(events, options))
    return document
