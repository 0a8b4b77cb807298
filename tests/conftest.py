"""Shared pytest fixtures for all tests."""
import json
from typing import Any, Dict, List, Optional, Sequence

import pytest

from bdd_json_report import (
    DATA_TABLE_PARSED,
    DOC_STRING_PARSED,
    EXAMPLE_ROW_PARSED,
    FEATURE_PARSED,
    SCENARIO_OUTLINE_PARSED,
    SCENARIO_PARSED,
    STEP_PARSED,
    TAG_PARSED,
    TEST_CASE_FINISHED,
    TEST_CASE_PREPARED,
    TEST_RUN_FINISHED,
    TEST_STEP_ATTACHMENT,
    TEST_STEP_FINISHED,
    PICKLE_ACCEPTED,
    Event,
    EventBroadcaster,
    EventDataCollector,
    JsonFormatter,
)


def loc(line: int, uri: str = "a.feature") -> Dict[str, Any]:
    """Location payload for *line* of *uri*."""
    return {"uri": uri, "line": line}


class Run:
    """One run's broadcaster, collector and formatter, plus emit helpers.

    The document helpers stand in for the Gherkin parser; the lifecycle
    helpers stand in for the executor.
    """

    def __init__(self) -> None:
        self.broadcaster = EventBroadcaster()
        self.collector = EventDataCollector(self.broadcaster)
        self.output: List[str] = []
        self.formatter = JsonFormatter(self.broadcaster, self.collector, self.output.append)

    def emit(self, event_type: str, payload: Optional[Dict[str, Any]] = None) -> Event:
        event = Event(event_type=event_type, payload=payload or {})
        self.broadcaster.emit(event)
        return event

    # -- document structure -----------------------------------------------

    def feature(self, line: int, name: str, keyword: str = "Feature",
                description: Optional[str] = None, uri: str = "a.feature") -> None:
        self.emit(FEATURE_PARSED, {
            "location": loc(line, uri), "keyword": keyword, "name": name,
            "description": description,
        })

    def scenario(self, line: int, name: str, keyword: str = "Scenario",
                 description: Optional[str] = None, uri: str = "a.feature") -> None:
        self.emit(SCENARIO_PARSED, {
            "location": loc(line, uri), "keyword": keyword, "name": name,
            "description": description,
        })

    def outline(self, line: int, name: str, keyword: str = "Scenario Outline",
                description: Optional[str] = None, uri: str = "a.feature") -> None:
        self.emit(SCENARIO_OUTLINE_PARSED, {
            "location": loc(line, uri), "keyword": keyword, "name": name,
            "description": description,
        })

    def example_row(self, line: int, outline_line: int, name: str,
                    steps: Dict[int, str], keyword: str = "Scenario",
                    uri: str = "a.feature") -> None:
        self.emit(EXAMPLE_ROW_PARSED, {
            "location": loc(line, uri), "outline": loc(outline_line, uri),
            "keyword": keyword, "name": name,
            "steps": [{"line": ln, "text": text} for ln, text in steps.items()],
        })

    def step(self, line: int, text: str, keyword: str = "Given ", uri: str = "a.feature") -> None:
        self.emit(STEP_PARSED, {"location": loc(line, uri), "keyword": keyword, "text": text})

    def tag(self, line: int, name: str, target_line: int, uri: str = "a.feature") -> None:
        self.emit(TAG_PARSED, {
            "location": loc(line, uri), "name": name, "target": loc(target_line, uri),
        })

    def doc_string(self, line: int, step_line: int, content: str, uri: str = "a.feature") -> None:
        self.emit(DOC_STRING_PARSED, {
            "location": loc(line, uri), "step": loc(step_line, uri), "content": content,
        })

    def data_table(self, line: int, step_line: int, rows: Sequence[Sequence[str]],
                   uri: str = "a.feature") -> None:
        self.emit(DATA_TABLE_PARSED, {
            "location": loc(line, uri), "step": loc(step_line, uri),
            "rows": [list(row) for row in rows],
        })

    # -- execution lifecycle ----------------------------------------------

    def accept(self, line: int, uri: str = "a.feature") -> None:
        self.emit(PICKLE_ACCEPTED, {"source_location": loc(line, uri), "uri": uri})

    def prepare(self, line: int, steps: Sequence[Dict[str, Any]], uri: str = "a.feature") -> None:
        self.emit(TEST_CASE_PREPARED, {"source_location": loc(line, uri), "steps": list(steps)})

    def step_finished(self, line: int, index: int, status: str = "passed",
                      duration: Optional[float] = 1, exception: Optional[str] = None,
                      uri: str = "a.feature") -> None:
        result: Dict[str, Any] = {"status": status, "duration": duration}
        if exception is not None:
            result["exception"] = exception
        self.emit(TEST_STEP_FINISHED, {
            "test_case": {"source_location": loc(line, uri)}, "index": index, "result": result,
        })

    def attach(self, line: int, index: int, data: str, media_type: str,
               uri: str = "a.feature") -> None:
        self.emit(TEST_STEP_ATTACHMENT, {
            "test_case": {"source_location": loc(line, uri)}, "index": index,
            "data": data, "media": {"type": media_type},
        })

    def case_finished(self, line: int, status: str = "passed", uri: str = "a.feature") -> None:
        self.emit(TEST_CASE_FINISHED, {
            "source_location": loc(line, uri), "result": {"duration": 1, "status": status},
        })

    def run_case(self, line: int, step_lines: Sequence[int], status: str = "passed",
                 uri: str = "a.feature") -> None:
        """Prepare, pass every step and finish one case."""
        self.prepare(line, [{"source_location": loc(s, uri)} for s in step_lines], uri=uri)
        for index, _ in enumerate(step_lines):
            self.step_finished(line, index, status=status, uri=uri)
        self.case_finished(line, status=status, uri=uri)

    def finish(self) -> Any:
        self.emit(TEST_RUN_FINISHED)
        return json.loads("".join(self.output))


@pytest.fixture
def run() -> Run:
    """A fresh run wired to a JsonFormatter writing into ``run.output``."""
    return Run()
