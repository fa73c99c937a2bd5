"""
Signal comparison routines used by custom signal conditions.

Each family compares the signal value found in the evaluation context with
the target values of the condition. Problems with the data (wrong number of
targets, values that do not parse) raise ``SignalComparisonError``; the
condition evaluator turns those into a ``False`` result.
"""

import operator
import re
from typing import Callable, Dict, Sequence

from ..config.value import parse_double
from ..diagnostics import AnomalyCode
from .models import CustomSignalOperator

# Max number of segments a semantic version can have.
MAX_SEMANTIC_VERSION_SEGMENTS = 5

SEMANTIC_VERSION_PATTERN = re.compile(
    r"[0-9]+(?:\.[0-9]+){0,%d}" % (MAX_SEMANTIC_VERSION_SEGMENTS - 1)
)

Comparison = Callable[[object, object], bool]

NUMERIC_OPERATORS: Dict[CustomSignalOperator, Comparison] = {
    CustomSignalOperator.NUMERIC_LESS_THAN: operator.lt,
    CustomSignalOperator.NUMERIC_LESS_EQUAL: operator.le,
    CustomSignalOperator.NUMERIC_EQUAL: operator.eq,
    CustomSignalOperator.NUMERIC_NOT_EQUAL: operator.ne,
    CustomSignalOperator.NUMERIC_GREATER_THAN: operator.gt,
    CustomSignalOperator.NUMERIC_GREATER_EQUAL: operator.ge,
}

SEMANTIC_VERSION_OPERATORS: Dict[CustomSignalOperator, Comparison] = {
    CustomSignalOperator.SEMANTIC_VERSION_LESS_THAN: operator.lt,
    CustomSignalOperator.SEMANTIC_VERSION_LESS_EQUAL: operator.le,
    CustomSignalOperator.SEMANTIC_VERSION_EQUAL: operator.eq,
    CustomSignalOperator.SEMANTIC_VERSION_NOT_EQUAL: operator.ne,
    CustomSignalOperator.SEMANTIC_VERSION_GREATER_THAN: operator.gt,
    CustomSignalOperator.SEMANTIC_VERSION_GREATER_EQUAL: operator.ge,
}


class SignalComparisonError(Exception):
    """Raised when a signal or its targets cannot be compared."""

    def __init__(self, code: AnomalyCode, message: str, **details):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)


def compare_signal(
    signal_operator: CustomSignalOperator,
    signal_value: str,
    target_values: Sequence[str],
) -> bool:
    """Apply ``signal_operator`` to a signal value and its targets."""
    if signal_operator.is_string:
        return compare_strings(signal_operator, signal_value, target_values)
    if signal_operator in NUMERIC_OPERATORS:
        return compare_numbers(NUMERIC_OPERATORS[signal_operator], signal_value, target_values)
    if signal_operator in SEMANTIC_VERSION_OPERATORS:
        return compare_semantic_versions(
            SEMANTIC_VERSION_OPERATORS[signal_operator], signal_value, target_values
        )
    raise SignalComparisonError(
        AnomalyCode.UNSPECIFIED_OPERATOR,
        "Unsupported custom signal operator",
        operator=signal_operator.value,
    )


def compare_strings(
    signal_operator: CustomSignalOperator,
    signal_value: str,
    target_values: Sequence[str],
) -> bool:
    """String family. A match against any target counts (case-sensitive).

    STRING_DOES_NOT_CONTAIN holds only when no target is contained.
    """
    if signal_operator == CustomSignalOperator.STRING_CONTAINS:
        return any(target in signal_value for target in target_values)
    if signal_operator == CustomSignalOperator.STRING_DOES_NOT_CONTAIN:
        return not any(target in signal_value for target in target_values)
    if signal_operator == CustomSignalOperator.STRING_EXACTLY_MATCHES:
        return any(target == signal_value for target in target_values)
    if signal_operator == CustomSignalOperator.STRING_CONTAINS_REGEX:
        return _matches_any_pattern(signal_value, target_values)
    raise SignalComparisonError(
        AnomalyCode.UNSPECIFIED_OPERATOR,
        "Unsupported string operator",
        operator=signal_operator.value,
    )


def _matches_any_pattern(signal_value: str, patterns: Sequence[str]) -> bool:
    invalid_patterns = []
    for pattern in patterns:
        try:
            if re.fullmatch(pattern, signal_value):
                return True
        except re.error:
            invalid_patterns.append(pattern)

    if invalid_patterns:
        raise SignalComparisonError(
            AnomalyCode.INVALID_REGEX,
            "Invalid regular expression in target values",
            patterns=invalid_patterns,
        )
    return False


def _single_target(target_values: Sequence[str], family: str) -> str:
    if len(target_values) != 1:
        raise SignalComparisonError(
            AnomalyCode.INVALID_TARGET_ARITY,
            f"Target values must contain 1 element for {family} operations",
            target_values=list(target_values),
        )
    return target_values[0]


def compare_numbers(
    comparison: Comparison,
    signal_value: str,
    target_values: Sequence[str],
) -> bool:
    """Numeric family. Both sides are compared as IEEE doubles."""
    target_value = _single_target(target_values, "numeric")
    try:
        signal_number = parse_double(signal_value)
        target_number = parse_double(target_value)
    except ValueError:
        raise SignalComparisonError(
            AnomalyCode.INVALID_NUMBER,
            "Unable to parse numeric custom signal",
            signal_value=signal_value,
            target_value=target_value,
        )
    return comparison(signal_number, target_number)


def parse_semantic_version(version: str) -> Sequence[int]:
    """Split ``version`` into integer segments.

    Raises:
        ValueError: if ``version`` is not 1 to 5 dot separated integers.
    """
    if not SEMANTIC_VERSION_PATTERN.fullmatch(version):
        raise ValueError(f"Invalid semantic version: {version!r}")
    return [int(segment) for segment in version.split(".")]


def semantic_version_cmp(left: Sequence[int], right: Sequence[int]) -> int:
    """Three-way compare of two versions, missing segments count as 0."""
    length = max(len(left), len(right))
    padded_left = list(left) + [0] * (length - len(left))
    padded_right = list(right) + [0] * (length - len(right))
    for left_segment, right_segment in zip(padded_left, padded_right):
        if left_segment < right_segment:
            return -1
        if left_segment > right_segment:
            return 1
    return 0


def compare_semantic_versions(
    comparison: Comparison,
    signal_value: str,
    target_values: Sequence[str],
) -> bool:
    """Semantic version family, e.g. ``"1.2" == "1.2.0"``."""
    target_value = _single_target(target_values, "semantic version")
    try:
        signal_version = parse_semantic_version(signal_value)
        target_version = parse_semantic_version(target_value)
    except ValueError:
        raise SignalComparisonError(
            AnomalyCode.INVALID_SEMANTIC_VERSION,
            "Invalid semantic version in custom signal",
            signal_value=signal_value,
            target_value=target_value,
        )
    return comparison(semantic_version_cmp(signal_version, target_version), 0)
