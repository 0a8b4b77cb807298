"""
bdd-json-report: Cucumber JSON reports from BDD test-execution event streams.

This library collects the events emitted while a Gherkin suite runs
(document structure, case preparation, step results, attachments) and, when
the run finishes, correlates them into one Cucumber JSON report document.

Example:
    >>> from bdd_json_report import (
    ...     EventBroadcaster, EventDataCollector, JsonFormatter, Event,
    ...     TEST_RUN_FINISHED,
    ... )
    >>> broadcaster = EventBroadcaster()
    >>> collector = EventDataCollector(broadcaster)
    >>> written = []
    >>> formatter = JsonFormatter(broadcaster, collector, written.append)
    >>> broadcaster.emit(Event(event_type=TEST_RUN_FINISHED))
    >>> written
    ['[]']

Each run must use its own collector/formatter pair.
"""

__version__ = "1.0.0"

# Core data models
from bdd_json_report.models import (
    Event,
    SourceLocation,
    BddJsonReportError,
    ValidationError,
)

# Statuses
from bdd_json_report.status import (
    FAILING_STATUSES,
    Status,
    normalize_status,
)

# Document structure contracts
from bdd_json_report.document import (
    FEATURE_PARSED,
    BACKGROUND_PARSED,
    SCENARIO_PARSED,
    SCENARIO_OUTLINE_PARSED,
    EXAMPLE_ROW_PARSED,
    STEP_PARSED,
    TAG_PARSED,
    DOC_STRING_PARSED,
    DATA_TABLE_PARSED,
    DOCUMENT_EVENT_TYPES,
    FeatureNode,
    BackgroundNode,
    ScenarioNode,
    ScenarioOutlineNode,
    ExampleRowNode,
    ExampleStepText,
    StepNode,
    TagNode,
    DocStringNode,
    DataTableNode,
)

# Execution lifecycle contracts
from bdd_json_report.execution import (
    PICKLE_ACCEPTED,
    TEST_CASE_PREPARED,
    TEST_STEP_FINISHED,
    TEST_STEP_ATTACHMENT,
    TEST_CASE_FINISHED,
    TEST_RUN_FINISHED,
    EXECUTION_EVENT_TYPES,
    StepResult,
    TestStepShape,
)

# Broadcaster
from bdd_json_report.broadcaster import EventBroadcaster

# Collector
from bdd_json_report.collector import (
    Attachment,
    CaseRecord,
    CollectorAnomaly,
    EventDataCollector,
    StepRecord,
)

# Report models and formatter
from bdd_json_report.report import (
    REPORT_SCHEMA_VERSION,
    ElementReport,
    FeatureReport,
    StepReport,
)
from bdd_json_report.formatter import (
    FormatterOptions,
    JsonFormatter,
    slugify,
)

# Replay helpers
from bdd_json_report.replay import render_events, replay_events

# Conformance
from bdd_json_report.conformance import (
    ConformanceResult,
    report_json_schema,
    validate_report,
)

__all__ = [
    # Version
    "__version__",
    # Core data models
    "Event",
    "SourceLocation",
    "BddJsonReportError",
    "ValidationError",
    # Statuses
    "FAILING_STATUSES",
    "Status",
    "normalize_status",
    # Document structure contracts
    "FEATURE_PARSED",
    "BACKGROUND_PARSED",
    "SCENARIO_PARSED",
    "SCENARIO_OUTLINE_PARSED",
    "EXAMPLE_ROW_PARSED",
    "STEP_PARSED",
    "TAG_PARSED",
    "DOC_STRING_PARSED",
    "DATA_TABLE_PARSED",
    "DOCUMENT_EVENT_TYPES",
    "FeatureNode",
    "BackgroundNode",
    "ScenarioNode",
    "ScenarioOutlineNode",
    "ExampleRowNode",
    "ExampleStepText",
    "StepNode",
    "TagNode",
    "DocStringNode",
    "DataTableNode",
    # Execution lifecycle contracts
    "PICKLE_ACCEPTED",
    "TEST_CASE_PREPARED",
    "TEST_STEP_FINISHED",
    "TEST_STEP_ATTACHMENT",
    "TEST_CASE_FINISHED",
    "TEST_RUN_FINISHED",
    "EXECUTION_EVENT_TYPES",
    "StepResult",
    "TestStepShape",
    # Broadcaster
    "EventBroadcaster",
    # Collector
    "Attachment",
    "CaseRecord",
    "CollectorAnomaly",
    "EventDataCollector",
    "StepRecord",
    # Report models and formatter
    "REPORT_SCHEMA_VERSION",
    "ElementReport",
    "FeatureReport",
    "StepReport",
    "FormatterOptions",
    "JsonFormatter",
    "slugify",
    # Replay helpers
    "render_events",
    "replay_events",
    # Conformance
    "ConformanceResult",
    "report_json_schema",
    "validate_report",
]
