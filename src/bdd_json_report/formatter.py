"""JSON report formatter.

Listens for the terminal TestRunFinished event, correlates the collector's
document and run indexes into the feature/element/step tree and writes the
serialized report through the host-supplied ``log`` sink.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from bdd_json_report.broadcaster import EventBroadcaster
from bdd_json_report.collector import CaseRecord, EventDataCollector, StepRecord
from bdd_json_report.document import (
    DataTableNode,
    DocStringNode,
    ExampleRowNode,
    FeatureNode,
    ScenarioNode,
    ScenarioOutlineNode,
    StepNode,
    data_table_cells,
)
from bdd_json_report.execution import TEST_RUN_FINISHED, StepResult, TestStepShape
from bdd_json_report.models import Event, SourceLocation
from bdd_json_report.report import (
    HOOK_AFTER_KEYWORD,
    HOOK_BEFORE_KEYWORD,
    ArgumentReport,
    DataTableArgumentReport,
    DocStringArgumentReport,
    ElementReport,
    EmbeddingReport,
    FeatureReport,
    MatchReport,
    ResultReport,
    RowReport,
    StepReport,
    TagReport,
    dump_features,
)
from bdd_json_report.status import FAILING_STATUSES

logger = logging.getLogger("bdd_json_report.formatter")

# Milliseconds (collector unit) to nanoseconds (report unit)
NANOSECONDS_PER_MILLISECOND: int = 1_000_000

_SLUG_SEPARATOR_RE = re.compile(r"[\W_]+")


def slugify(name: str) -> str:
    """Lower-case *name* and collapse every run of non letters/digits to '-'.

    Letters of any script are kept: ``slugify("обед")`` is ``"обед"``.
    """
    return _SLUG_SEPARATOR_RE.sub("-", name.lower()).strip("-")


def format_location(location: SourceLocation) -> str:
    return f"{location.uri}:{location.line}"


def duration_to_nanoseconds(duration: Union[int, float]) -> int:
    if isinstance(duration, int):
        return duration * NANOSECONDS_PER_MILLISECOND
    return round(duration * NANOSECONDS_PER_MILLISECOND)


class FormatterOptions(BaseModel):
    """Serialization options for the written report."""

    model_config = ConfigDict(frozen=True)

    indent: Optional[int] = Field(
        2, ge=0, description="json.dumps indent; None writes a single line"
    )
    ensure_ascii: bool = Field(
        False, description="Escape non-ASCII characters in the written text"
    )


class JsonFormatter:
    """Builds the JSON report once the run has finished.

    Args:
        broadcaster: Event source shared with the collector.
        collector: The collector of the same run; read only.
        log: Sink receiving the serialized report (one call per run).
        options: Serialization options.
    """

    def __init__(
        self,
        broadcaster: EventBroadcaster,
        collector: EventDataCollector,
        log: Callable[[str], None],
        options: Optional[FormatterOptions] = None,
    ) -> None:
        self._collector = collector
        self._log = log
        self._options = options or FormatterOptions()
        broadcaster.on(TEST_RUN_FINISHED, self._on_run_finished)

    def _on_run_finished(self, event: Event) -> None:
        features = self.build_report()
        self._log(
            json.dumps(
                features,
                indent=self._options.indent,
                ensure_ascii=self._options.ensure_ascii,
            )
        )
        logger.info("Wrote JSON report with %d feature(s)", len(features))

    def build_report(self) -> List[Dict[str, Any]]:
        """Return the report as JSON-ready data (a list of features)."""
        return dump_features(self.build_features())

    def build_features(self) -> List[FeatureReport]:
        """Correlate collected state into feature reports.

        Cases are taken in run order (TestCaseFinished order) and grouped
        under their feature, features in first-seen order.
        """
        collector = self._collector
        grouped: Dict[str, List[ElementReport]] = {}
        features: Dict[str, FeatureNode] = {}

        for identity in collector.finished_case_identities():
            record = collector.case_record(identity)
            if record is None:
                continue
            feature = collector.feature_for(record.uri)
            if feature is None:
                logger.debug("Dropping test case %s: no feature parsed for %r", identity, record.uri)
                continue
            element = self._build_element(feature, record)
            if element is None:
                logger.debug("Dropping test case %s: no scenario parsed at that location", identity)
                continue
            features.setdefault(record.uri, feature)
            grouped.setdefault(record.uri, []).append(element)

        return [
            self._build_feature(features[uri], elements)
            for uri, elements in grouped.items()
        ]

    # -- tree building ----------------------------------------------------

    def _tags(self, location: SourceLocation) -> List[TagReport]:
        return [
            TagReport(name=tag.name, line=tag.location.line)
            for tag in self._collector.tags_for(location)
        ]

    def _build_feature(self, feature: FeatureNode, elements: List[ElementReport]) -> FeatureReport:
        return FeatureReport(
            description=feature.description,
            elements=elements,
            id=slugify(feature.name),
            keyword=feature.keyword,
            line=feature.location.line,
            name=feature.name,
            tags=self._tags(feature.location),
            uri=feature.location.uri,
        )

    def _build_element(self, feature: FeatureNode, record: CaseRecord) -> Optional[ElementReport]:
        identity = record.identity
        node = self._collector.document_node_at(identity)
        row: Optional[ExampleRowNode] = None

        if isinstance(node, ScenarioNode):
            description = node.description
        elif isinstance(node, ExampleRowNode):
            row = node
            outline = self._collector.document_node_at(node.outline)
            description = outline.description if isinstance(outline, ScenarioOutlineNode) else None
        else:
            return None

        return ElementReport(
            description=description,
            id=f"{slugify(feature.name)};{slugify(node.name)}",
            keyword=node.keyword,
            line=identity.line,
            name=node.name,
            steps=self._build_steps(record, row),
            tags=self._tags(identity),
            type="scenario",
        )

    def _build_steps(self, record: CaseRecord, row: Optional[ExampleRowNode]) -> List[StepReport]:
        steps: List[StepReport] = []
        document_step_seen = False
        for index, shape in enumerate(record.steps):
            step_record = record.step_record(index)
            location = shape.source_location
            if location is None:
                keyword = HOOK_AFTER_KEYWORD if document_step_seen else HOOK_BEFORE_KEYWORD
                steps.append(self._build_hook_step(shape, step_record, keyword))
            else:
                document_step_seen = True
                steps.append(self._build_document_step(location, shape, step_record, row))
        return steps

    def _build_hook_step(
        self,
        shape: TestStepShape,
        step_record: Optional[StepRecord],
        keyword: str,
    ) -> StepReport:
        return StepReport(
            embeddings=self._embeddings(step_record),
            hidden=True,
            keyword=keyword,
            match=self._match(shape),
            result=self._result(step_record),
        )

    def _build_document_step(
        self,
        location: SourceLocation,
        shape: TestStepShape,
        step_record: Optional[StepRecord],
        row: Optional[ExampleRowNode],
    ) -> StepReport:
        node = self._collector.document_node_at(location)
        keyword: Optional[str] = None
        name: Optional[str] = None
        if isinstance(node, StepNode):
            keyword = node.keyword
            name = node.text
        if row is not None:
            substituted = row.step_text(location.line)
            if substituted is not None:
                name = substituted

        return StepReport(
            arguments=self._arguments(location),
            embeddings=self._embeddings(step_record),
            keyword=keyword,
            line=location.line,
            match=self._match(shape),
            name=name,
            result=self._result(step_record),
        )

    def _arguments(self, location: SourceLocation) -> List[ArgumentReport]:
        argument = self._collector.argument_for(location)
        if isinstance(argument, DocStringNode):
            return [DocStringArgumentReport(line=argument.location.line, content=argument.content)]
        if isinstance(argument, DataTableNode):
            return [
                DataTableArgumentReport(
                    rows=[RowReport(cells=cells) for cells in data_table_cells(argument)]
                )
            ]
        return []

    @staticmethod
    def _match(shape: TestStepShape) -> Optional[MatchReport]:
        if shape.action_location is None:
            return None
        return MatchReport(location=format_location(shape.action_location))

    @staticmethod
    def _embeddings(step_record: Optional[StepRecord]) -> Optional[List[EmbeddingReport]]:
        if step_record is None or not step_record.attachments:
            return None
        return [
            EmbeddingReport(data=attachment.data, mime_type=attachment.media_type)
            for attachment in step_record.attachments
        ]

    @staticmethod
    def _result(step_record: Optional[StepRecord]) -> Optional[ResultReport]:
        if step_record is None or step_record.result is None:
            return None
        result: StepResult = step_record.result
        duration = None
        if result.duration is not None:
            duration = duration_to_nanoseconds(result.duration)
        error_message = None
        if result.status in FAILING_STATUSES and result.exception is not None:
            error_message = result.exception
        return ResultReport(
            status=result.status.value,
            duration=duration,
            error_message=error_message,
        )
