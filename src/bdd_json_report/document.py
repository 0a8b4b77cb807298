"""Document structure event contracts.

Provides the structural parse event type constants emitted by the Gherkin
parser, and the frozen node models those events carry. Every node is keyed
by its SourceLocation; tags and step arguments point back at their owner
through ``target`` / ``step``.
"""
from __future__ import annotations

from typing import Dict, FrozenSet, List, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field

from bdd_json_report.models import SourceLocation

# ── Section 1: Event Type Constants ──────────────────────────────────────────

FEATURE_PARSED: str = "FeatureParsed"
BACKGROUND_PARSED: str = "BackgroundParsed"
SCENARIO_PARSED: str = "ScenarioParsed"
SCENARIO_OUTLINE_PARSED: str = "ScenarioOutlineParsed"
EXAMPLE_ROW_PARSED: str = "ExampleRowParsed"
STEP_PARSED: str = "StepParsed"
TAG_PARSED: str = "TagParsed"
DOC_STRING_PARSED: str = "DocStringParsed"
DATA_TABLE_PARSED: str = "DataTableParsed"

DOCUMENT_EVENT_TYPES: FrozenSet[str] = frozenset({
    FEATURE_PARSED,
    BACKGROUND_PARSED,
    SCENARIO_PARSED,
    SCENARIO_OUTLINE_PARSED,
    EXAMPLE_ROW_PARSED,
    STEP_PARSED,
    TAG_PARSED,
    DOC_STRING_PARSED,
    DATA_TABLE_PARSED,
})

# ── Section 2: Structural Nodes ──────────────────────────────────────────────


class FeatureNode(BaseModel):
    """Top-level feature of one source document."""

    model_config = ConfigDict(frozen=True)

    location: SourceLocation
    keyword: str = Field(..., min_length=1, description="Localized keyword, e.g. 'Feature'")
    name: str
    description: Optional[str] = None


class BackgroundNode(BaseModel):
    """Background block whose steps run before every scenario of a feature."""

    model_config = ConfigDict(frozen=True)

    location: SourceLocation
    keyword: str = Field(..., min_length=1)
    name: str = ""
    description: Optional[str] = None


class ScenarioNode(BaseModel):
    """A plain scenario (possibly nested in a rule)."""

    model_config = ConfigDict(frozen=True)

    location: SourceLocation
    keyword: str = Field(..., min_length=1)
    name: str
    description: Optional[str] = None


class ScenarioOutlineNode(BaseModel):
    """The template of a scenario outline; never executed directly."""

    model_config = ConfigDict(frozen=True)

    location: SourceLocation
    keyword: str = Field(..., min_length=1)
    name: str
    description: Optional[str] = None


class ExampleStepText(BaseModel):
    """Step text of one outline step with the row's values substituted."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(..., ge=0, description="Line of the template step")
    text: str


class ExampleRowNode(BaseModel):
    """A concrete outline instance produced by one examples table row.

    ``location`` is the row itself; ``outline`` points at the template.
    ``keyword`` is the scenario keyword the parser chose for instances.
    """

    model_config = ConfigDict(frozen=True)

    location: SourceLocation
    outline: SourceLocation
    keyword: str = Field(..., min_length=1)
    name: str
    steps: Tuple[ExampleStepText, ...] = ()

    def step_text(self, line: int) -> Optional[str]:
        for step in self.steps:
            if step.line == line:
                return step.text
        return None


class StepNode(BaseModel):
    """A step as written in the document (placeholders unresolved in outlines)."""

    model_config = ConfigDict(frozen=True)

    location: SourceLocation
    keyword: str = Field(..., min_length=1, description="Keyword with trailing space, e.g. 'Given '")
    text: str


class TagNode(BaseModel):
    """A tag, attached to the node declared at ``target``."""

    model_config = ConfigDict(frozen=True)

    location: SourceLocation
    name: str = Field(..., min_length=1, description="Tag including '@'")
    target: SourceLocation


class DocStringNode(BaseModel):
    """Doc string argument of the step declared at ``step``."""

    model_config = ConfigDict(frozen=True)

    location: SourceLocation
    step: SourceLocation
    content: str


class DataTableNode(BaseModel):
    """Data table argument of the step declared at ``step``."""

    model_config = ConfigDict(frozen=True)

    location: SourceLocation
    step: SourceLocation
    rows: Tuple[Tuple[str, ...], ...] = ()


# Nodes stored in the document index by their own location
DocumentNode = Union[
    FeatureNode,
    BackgroundNode,
    ScenarioNode,
    ScenarioOutlineNode,
    ExampleRowNode,
    StepNode,
]

StepArgument = Union[DocStringNode, DataTableNode]

# Map event types to their node models
EVENT_TO_NODE: Dict[str, Type[BaseModel]] = {
    FEATURE_PARSED: FeatureNode,
    BACKGROUND_PARSED: BackgroundNode,
    SCENARIO_PARSED: ScenarioNode,
    SCENARIO_OUTLINE_PARSED: ScenarioOutlineNode,
    EXAMPLE_ROW_PARSED: ExampleRowNode,
    STEP_PARSED: StepNode,
    TAG_PARSED: TagNode,
    DOC_STRING_PARSED: DocStringNode,
    DATA_TABLE_PARSED: DataTableNode,
}


def data_table_cells(table: DataTableNode) -> List[List[str]]:
    """Return the table cells as nested lists in row/column order."""
    return [list(row) for row in table.rows]
