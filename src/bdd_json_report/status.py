"""Step and test-case outcome statuses."""

from enum import Enum
from typing import FrozenSet

from bdd_json_report.models import ValidationError


class Status(str, Enum):
    """Outcome of a test step or test case."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    PENDING = "pending"
    AMBIGUOUS = "ambiguous"
    UNDEFINED = "undefined"


# Statuses whose recorded error detail is surfaced as error_message.
FAILING_STATUSES: FrozenSet[Status] = frozenset({Status.FAILED, Status.AMBIGUOUS})


def normalize_status(value: object) -> Status:
    """Resolve a status value to a Status, ignoring case.

    Args:
        value: A Status member, or a status name in any casing
            (``"passed"``, ``"PASSED"``, ``"Passed"``).

    Returns:
        The corresponding Status enum member.

    Raises:
        ValidationError: If value is not a known status.
    """
    if isinstance(value, Status):
        return value

    if isinstance(value, str):
        lowered = value.strip().lower()
        for member in Status:
            if member.value == lowered:
                return member

    raise ValidationError(
        f"Unknown status value: {value!r}. "
        f"Valid values: {[m.value for m in Status]}"
    )
