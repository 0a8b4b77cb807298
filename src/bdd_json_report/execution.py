"""Test execution lifecycle event contracts.

Provides the lifecycle event type constants emitted by the executor and the
payload models the collector validates them against. Test cases are
identified by their declared SourceLocation (the example row for outline
instances), steps by their index in the prepared shape.
"""
from __future__ import annotations

from typing import Dict, FrozenSet, Optional, Tuple, Type, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    field_validator,
)

from bdd_json_report.models import SourceLocation, ValidationError
from bdd_json_report.status import Status, normalize_status

# ── Section 1: Event Type Constants ──────────────────────────────────────────

PICKLE_ACCEPTED: str = "PickleAccepted"
TEST_CASE_PREPARED: str = "TestCasePrepared"
TEST_STEP_FINISHED: str = "TestStepFinished"
TEST_STEP_ATTACHMENT: str = "TestStepAttachment"
TEST_CASE_FINISHED: str = "TestCaseFinished"
TEST_RUN_FINISHED: str = "TestRunFinished"

EXECUTION_EVENT_TYPES: FrozenSet[str] = frozenset({
    PICKLE_ACCEPTED,
    TEST_CASE_PREPARED,
    TEST_STEP_FINISHED,
    TEST_STEP_ATTACHMENT,
    TEST_CASE_FINISHED,
    TEST_RUN_FINISHED,
})

# ── Section 2: Shared Models ─────────────────────────────────────────────────


class TestCaseRef(BaseModel):
    """Reference to a test case by its identity."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    source_location: SourceLocation


class StepResult(BaseModel):
    """Outcome of one step (or a whole case).

    Duration is in milliseconds. Integer durations stay integers so the
    nanosecond conversion is exact for any magnitude.
    """

    model_config = ConfigDict(frozen=True)

    status: Status
    duration: Optional[Union[NonNegativeInt, NonNegativeFloat]] = None
    exception: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("exception", "error"),
        description="Error detail; meaningful for failing statuses only",
    )

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, v: object) -> Status:
        try:
            return normalize_status(v)
        except ValidationError as exc:
            raise ValueError(str(exc)) from exc


class TestStepShape(BaseModel):
    """Declared shape of one step: hooks have no source_location."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    source_location: Optional[SourceLocation] = None
    action_location: Optional[SourceLocation] = None


class MediaType(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = Field(..., min_length=1)


# ── Section 3: Payload Models ────────────────────────────────────────────────


class PickleAcceptedPayload(BaseModel):
    """Payload for PickleAccepted events (one per executable case)."""

    model_config = ConfigDict(frozen=True)

    source_location: SourceLocation
    uri: str = Field(..., min_length=1)


class TestCasePreparedPayload(BaseModel):
    """Payload for TestCasePrepared events."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    source_location: SourceLocation
    steps: Tuple[TestStepShape, ...] = ()


class TestStepFinishedPayload(BaseModel):
    """Payload for TestStepFinished events."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    test_case: TestCaseRef
    index: int = Field(..., ge=0)
    result: StepResult


class TestStepAttachmentPayload(BaseModel):
    """Payload for TestStepAttachment events."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    test_case: TestCaseRef
    index: int = Field(..., ge=0)
    data: str
    media: MediaType


class TestCaseFinishedPayload(BaseModel):
    """Payload for TestCaseFinished events."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    source_location: SourceLocation
    result: StepResult


class TestRunFinishedPayload(BaseModel):
    """Payload for TestRunFinished events."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    success: Optional[bool] = None


# Map event types to their payload models
EVENT_TO_PAYLOAD: Dict[str, Type[BaseModel]] = {
    PICKLE_ACCEPTED: PickleAcceptedPayload,
    TEST_CASE_PREPARED: TestCasePreparedPayload,
    TEST_STEP_FINISHED: TestStepFinishedPayload,
    TEST_STEP_ATTACHMENT: TestStepAttachmentPayload,
    TEST_CASE_FINISHED: TestCaseFinishedPayload,
    TEST_RUN_FINISHED: TestRunFinishedPayload,
}
