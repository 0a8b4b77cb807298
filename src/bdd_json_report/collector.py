"""Event data collector.

Accumulates two indexes from the event stream:

* the document index, keyed by SourceLocation, holding the parsed structural
  nodes plus their tags and step arguments;
* the run index, keyed by test-case identity (the case's SourceLocation),
  holding the prepared step shape, per-step results and attachments.

The collector never produces output and never rejects an event. Payloads
that fail validation, or that contradict earlier events, are recorded as
CollectorAnomaly entries and the stream continues.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from bdd_json_report.broadcaster import EventBroadcaster
from bdd_json_report.document import (
    EVENT_TO_NODE,
    DataTableNode,
    DocStringNode,
    DocumentNode,
    ExampleRowNode,
    FeatureNode,
    StepArgument,
    TagNode,
)
from bdd_json_report.execution import (
    EVENT_TO_PAYLOAD,
    TEST_CASE_FINISHED,
    PickleAcceptedPayload,
    StepResult,
    TestCaseFinishedPayload,
    TestCasePreparedPayload,
    TestStepAttachmentPayload,
    TestStepFinishedPayload,
    TestStepShape,
)
from bdd_json_report.models import Event, SourceLocation

logger = logging.getLogger("bdd_json_report.collector")


# ── Section 1: Anomaly Model ─────────────────────────────────────────────────


class CollectorAnomaly(BaseModel):
    """Non-fatal issue recorded while collecting.

    Valid kind values: "malformed_payload", "duplicate_node",
    "duplicate_argument", "step_index_out_of_shape".
    """

    model_config = ConfigDict(frozen=True)

    kind: str
    event_id: str
    message: str


# ── Section 2: Run Index Records ─────────────────────────────────────────────


@dataclass(frozen=True)
class Attachment:
    """Payload captured during a step, with its media type."""

    data: str
    media_type: str


@dataclass
class StepRecord:
    """Execution record of one step. ``result`` is None until the step finishes."""

    result: Optional[StepResult] = None
    attachments: List[Attachment] = field(default_factory=list)


@dataclass
class CaseRecord:
    """Everything observed at run time for one test case.

    ``uri`` is the document the case belongs to: the identity's uri until a
    PickleAccepted event names it.
    """

    identity: SourceLocation
    uri: str
    steps: Tuple[TestStepShape, ...] = ()
    step_records: Dict[int, StepRecord] = field(default_factory=dict)
    result: Optional[StepResult] = None

    def step_record(self, index: int) -> Optional[StepRecord]:
        return self.step_records.get(index)


# ── Section 3: Collector ─────────────────────────────────────────────────────


class EventDataCollector:
    """Builds the document and run indexes for a single run.

    Construct one per run; it subscribes to *broadcaster* immediately.
    """

    def __init__(self, broadcaster: EventBroadcaster) -> None:
        self._nodes: Dict[SourceLocation, DocumentNode] = {}
        self._features_by_uri: Dict[str, FeatureNode] = {}
        self._tags: Dict[SourceLocation, List[TagNode]] = {}
        self._arguments: Dict[SourceLocation, StepArgument] = {}
        self._cases: Dict[SourceLocation, CaseRecord] = {}
        self._finished: Dict[SourceLocation, None] = {}
        self._anomalies: List[CollectorAnomaly] = []
        broadcaster.on_any(self._handle)

    # -- read accessors ---------------------------------------------------

    def document_node_at(self, location: SourceLocation) -> Optional[DocumentNode]:
        return self._nodes.get(location)

    def feature_for(self, uri: str) -> Optional[FeatureNode]:
        return self._features_by_uri.get(uri)

    def argument_for(self, step_location: SourceLocation) -> Optional[StepArgument]:
        return self._arguments.get(step_location)

    def tags_for(self, location: SourceLocation) -> Tuple[TagNode, ...]:
        """Tags applying to the node at *location*.

        Scenarios inherit their feature's tags; example rows additionally
        inherit their outline's tags. Order is feature, outline, own, each
        in declaration order, duplicates preserved.
        """
        node = self._nodes.get(location)
        tags: List[TagNode] = []
        if node is not None and not isinstance(node, FeatureNode):
            feature = self._features_by_uri.get(location.uri)
            if feature is not None:
                tags.extend(self._tags.get(feature.location, ()))
            if isinstance(node, ExampleRowNode):
                tags.extend(self._tags.get(node.outline, ()))
        tags.extend(self._tags.get(location, ()))
        return tuple(tags)

    def case_record(self, identity: SourceLocation) -> Optional[CaseRecord]:
        return self._cases.get(identity)

    def finished_case_identities(self) -> Tuple[SourceLocation, ...]:
        """Identities in the order their first TestCaseFinished arrived."""
        return tuple(self._finished)

    @property
    def anomalies(self) -> Tuple[CollectorAnomaly, ...]:
        return tuple(self._anomalies)

    # -- event handling ---------------------------------------------------

    def _handle(self, event: Event) -> None:
        node_cls = EVENT_TO_NODE.get(event.event_type)
        if node_cls is not None:
            node = self._validate(event, node_cls)
            if node is not None:
                self._store_node(event, node)
            return

        payload_cls = EVENT_TO_PAYLOAD.get(event.event_type)
        if payload_cls is None:
            return
        payload = self._validate(event, payload_cls)
        if payload is None:
            if event.event_type == TEST_CASE_FINISHED:
                self._finish_without_result(event)
            return

        if isinstance(payload, PickleAcceptedPayload):
            record = self._case(payload.source_location)
            record.uri = payload.uri

        elif isinstance(payload, TestCasePreparedPayload):
            record = self._case(payload.source_location)
            record.steps = payload.steps

        elif isinstance(payload, TestStepFinishedPayload):
            step = self._step(event, payload.test_case.source_location, payload.index)
            step.result = payload.result

        elif isinstance(payload, TestStepAttachmentPayload):
            step = self._step(event, payload.test_case.source_location, payload.index)
            step.attachments.append(
                Attachment(data=payload.data, media_type=payload.media.type)
            )

        elif isinstance(payload, TestCaseFinishedPayload):
            record = self._case(payload.source_location)
            record.result = payload.result
            self._finished.setdefault(payload.source_location, None)

    def _finish_without_result(self, event: Event) -> None:
        """Keep a case in run order when only its finish result is unusable."""
        try:
            identity = SourceLocation.model_validate(event.payload.get("source_location"))
        except PydanticValidationError:
            return
        self._case(identity)
        self._finished.setdefault(identity, None)

    def _validate(self, event: Event, model_cls: type[BaseModel]) -> Optional[BaseModel]:
        try:
            return model_cls.model_validate(event.payload)
        except PydanticValidationError as exc:
            self._record(
                "malformed_payload",
                event,
                f"Payload validation failed for {event.event_type!r}: {exc}",
            )
            return None

    def _store_node(self, event: Event, node: BaseModel) -> None:
        if isinstance(node, TagNode):
            self._tags.setdefault(node.target, []).append(node)
            return

        if isinstance(node, (DocStringNode, DataTableNode)):
            if node.step in self._arguments:
                self._record(
                    "duplicate_argument",
                    event,
                    f"Step at {node.step} already has an argument; replacing it",
                )
            self._arguments[node.step] = node
            return

        location: SourceLocation = node.location  # type: ignore[attr-defined]
        if location in self._nodes:
            self._record(
                "duplicate_node",
                event,
                f"Node at {location} parsed twice; keeping the latest",
            )
        self._nodes[location] = node  # type: ignore[assignment]
        if isinstance(node, FeatureNode):
            self._features_by_uri[location.uri] = node

    def _case(self, identity: SourceLocation) -> CaseRecord:
        record = self._cases.get(identity)
        if record is None:
            record = CaseRecord(identity=identity, uri=identity.uri)
            self._cases[identity] = record
        return record

    def _step(self, event: Event, identity: SourceLocation, index: int) -> StepRecord:
        record = self._case(identity)
        if index >= len(record.steps):
            self._record(
                "step_index_out_of_shape",
                event,
                f"Step index {index} is outside the prepared shape of {identity} "
                f"({len(record.steps)} steps)",
            )
        step = record.step_records.get(index)
        if step is None:
            step = StepRecord()
            record.step_records[index] = step
        return step

    def _record(self, kind: str, event: Event, message: str) -> None:
        logger.debug("%s (event %s): %s", kind, event.event_id, message)
        self._anomalies.append(
            CollectorAnomaly(kind=kind, event_id=event.event_id, message=message)
        )
