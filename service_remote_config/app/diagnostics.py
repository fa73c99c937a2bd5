"""
Evaluation diagnostics for Remote Config.

Data-quality problems never raise during evaluation. Each one is logged and,
when the caller passes a collector, also recorded as an ``Anomaly`` so the
outcome can be inspected without scraping logs.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import structlog


class AnomalyCode(str, Enum):
    """Kinds of data-quality problems found during evaluation."""
    MAX_DEPTH_EXCEEDED = "max_depth_exceeded"
    MALFORMED_CONDITION = "malformed_condition"
    EMPTY_AND_CONDITION = "empty_and_condition"
    MISSING_RANDOMIZATION_ID = "missing_randomization_id"
    UNSPECIFIED_OPERATOR = "unspecified_operator"
    MISSING_TARGET_VALUES = "missing_target_values"
    INVALID_TARGET_ARITY = "invalid_target_arity"
    INVALID_NUMBER = "invalid_number"
    INVALID_SEMANTIC_VERSION = "invalid_semantic_version"
    INVALID_REGEX = "invalid_regex"
    INVALID_PERCENT_CONDITION = "invalid_percent_condition"
    IN_APP_DEFAULT = "in_app_default"
    EMPTY_DEFAULT_VALUE = "empty_default_value"
    UNRESOLVABLE_VALUE = "unresolvable_value"


@dataclass(frozen=True)
class Anomaly:
    """A single data-quality problem."""
    code: AnomalyCode
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


class EvaluationDiagnostics:
    """Collects anomalies for one evaluation call."""

    def __init__(self):
        self._anomalies: List[Anomaly] = []

    def record(self, code: AnomalyCode, message: str, **details: Any) -> None:
        self._anomalies.append(Anomaly(code=code, message=message, details=details))

    @property
    def anomalies(self) -> Tuple[Anomaly, ...]:
        return tuple(self._anomalies)

    def codes(self) -> List[AnomalyCode]:
        return [anomaly.code for anomaly in self._anomalies]

    def __len__(self) -> int:
        return len(self._anomalies)


def report(
    logger: structlog.BoundLogger,
    diagnostics: Optional[EvaluationDiagnostics],
    code: AnomalyCode,
    message: str,
    level: str = "warning",
    **details: Any,
) -> None:
    """Log an anomaly and record it on ``diagnostics`` when one is given."""
    getattr(logger, level)(message, anomaly=code.value, **details)
    if diagnostics is not None:
        diagnostics.record(code, message, **details)
