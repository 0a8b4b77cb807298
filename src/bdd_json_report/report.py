"""Report document models (Cucumber JSON report format).

Optional fields set to None are omitted from the serialized document; see
``dump_features``. Field declaration order is the serialized key order.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

REPORT_SCHEMA_VERSION: str = "1.0.0"

HOOK_BEFORE_KEYWORD: str = "Before"
HOOK_AFTER_KEYWORD: str = "After"


class TagReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    line: int


class MatchReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    location: str = Field(..., description="'<uri>:<line>' of the step definition")


class EmbeddingReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: str
    mime_type: str


class DocStringArgumentReport(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    line: int
    content: str


class RowReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    cells: List[str]


class DataTableArgumentReport(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    rows: List[RowReport]


ArgumentReport = Union[DocStringArgumentReport, DataTableArgumentReport]


class ResultReport(BaseModel):
    """Step outcome; duration is in nanoseconds."""

    model_config = ConfigDict(frozen=True)

    status: str
    duration: Optional[int] = Field(None, ge=0)
    error_message: Optional[str] = None


class StepReport(BaseModel):
    """One step of an element.

    Hook steps carry ``hidden=True`` and no ``line`` or ``arguments``.
    """

    model_config = ConfigDict(frozen=True)

    arguments: Optional[List[ArgumentReport]] = None
    embeddings: Optional[List[EmbeddingReport]] = None
    hidden: Optional[Literal[True]] = None
    keyword: Optional[str] = None
    line: Optional[int] = None
    match: Optional[MatchReport] = None
    name: Optional[str] = None
    result: Optional[ResultReport] = None


class ElementReport(BaseModel):
    """One executed test case."""

    model_config = ConfigDict(frozen=True)

    description: Optional[str] = None
    id: str
    keyword: str
    line: int
    name: str
    steps: List[StepReport]
    tags: List[TagReport]
    type: Literal["scenario"] = "scenario"


class FeatureReport(BaseModel):
    """One feature with every executed case it owns."""

    model_config = ConfigDict(frozen=True)

    description: Optional[str] = None
    elements: List[ElementReport]
    id: str
    keyword: str
    line: int
    name: str
    tags: List[TagReport]
    uri: str


def dump_features(features: Sequence[FeatureReport]) -> List[Dict[str, Any]]:
    """Serialize report models to plain JSON-ready data, dropping None fields."""
    return [feature.model_dump(mode="json", exclude_none=True) for feature in features]
