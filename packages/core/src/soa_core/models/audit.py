"""Audit trail models for calculation transparency.

Every step of the waterfall is recorded as an ``AuditEntry`` so a reviewer
can trace each Schedule B figure back to its inputs. Conditions that need a
practitioner's attention but do not stop the calculation are recorded as
``AuditWarning``s.

Neither model carries a timestamp: a result must compare equal when the
same document is computed twice.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class AuditSeverity(str, Enum):
    """Severity levels for audit events."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class WarningCode(str, Enum):
    """Machine-readable warning codes raised by the engine."""
    UNKNOWN_ACCOUNT_CODE = "UNKNOWN_ACCOUNT_CODE"
    UNMATCHED_CHARGEHOLDER = "UNMATCHED_CHARGEHOLDER"
    AMBIGUOUS_CREDITOR_MATCH = "AMBIGUOUS_CREDITOR_MATCH"
    UNSECURED_TYPE_MISSING = "UNSECURED_TYPE_MISSING"
    SURPLUS_MISMATCH = "SURPLUS_MISMATCH"
    DOCUMENT_REPAIRED = "DOCUMENT_REPAIRED"


class AuditEntry(BaseModel):
    """Single calculation step.

    Attributes:
        step: Name of the step (e.g. "after_preferential")
        input_value: The inputs, as a readable expression
        output_value: The result of the step
        source: Where the rule comes from
        notes: Additional context
    """
    model_config = {"frozen": True}

    step: str
    input_value: str
    output_value: str
    source: str
    notes: Optional[str] = None


class AuditWarning(BaseModel):
    """Warning flagged for human review.

    Attributes:
        code: Machine-readable warning code
        message: Human-readable warning message
        field_name: The entity or field concerned
        expected_value: What was expected (if applicable)
        actual_value: What was found
        severity: Warning severity level
        requires_review: Whether this must be reviewed before the statement is signed
    """
    model_config = {"frozen": True}

    code: WarningCode
    message: str
    field_name: Optional[str] = None
    expected_value: Optional[str] = None
    actual_value: Optional[str] = None
    severity: AuditSeverity = AuditSeverity.WARNING
    requires_review: bool = True


__all__ = [
    "AuditSeverity",
    "WarningCode",
    "AuditEntry",
    "AuditWarning",
]
