"""
Condition data models for Remote Config.

A condition tree is a closed union of frozen dataclasses. Each node is
exactly one variant, so "several fields populated" cannot be represented.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from shared.errors import InvalidArgumentError


class PercentConditionOperator(str, Enum):
    """Percent condition operators."""
    LESS_OR_EQUAL = "LESS_OR_EQUAL"
    GREATER_THAN = "GREATER_THAN"
    BETWEEN = "BETWEEN"
    UNSPECIFIED = "PERCENT_OPERATOR_UNSPECIFIED"

    @classmethod
    def parse(cls, name: Optional[str]) -> "PercentConditionOperator":
        """Map a wire name to an operator, ``UNSPECIFIED`` when unknown."""
        try:
            return cls(name)
        except ValueError:
            return cls.UNSPECIFIED


class CustomSignalOperator(str, Enum):
    """Custom signal condition operators."""
    STRING_CONTAINS = "STRING_CONTAINS"
    STRING_DOES_NOT_CONTAIN = "STRING_DOES_NOT_CONTAIN"
    STRING_EXACTLY_MATCHES = "STRING_EXACTLY_MATCHES"
    STRING_CONTAINS_REGEX = "STRING_CONTAINS_REGEX"
    NUMERIC_LESS_THAN = "NUMERIC_LESS_THAN"
    NUMERIC_LESS_EQUAL = "NUMERIC_LESS_EQUAL"
    NUMERIC_EQUAL = "NUMERIC_EQUAL"
    NUMERIC_NOT_EQUAL = "NUMERIC_NOT_EQUAL"
    NUMERIC_GREATER_THAN = "NUMERIC_GREATER_THAN"
    NUMERIC_GREATER_EQUAL = "NUMERIC_GREATER_EQUAL"
    SEMANTIC_VERSION_LESS_THAN = "SEMANTIC_VERSION_LESS_THAN"
    SEMANTIC_VERSION_LESS_EQUAL = "SEMANTIC_VERSION_LESS_EQUAL"
    SEMANTIC_VERSION_EQUAL = "SEMANTIC_VERSION_EQUAL"
    SEMANTIC_VERSION_NOT_EQUAL = "SEMANTIC_VERSION_NOT_EQUAL"
    SEMANTIC_VERSION_GREATER_THAN = "SEMANTIC_VERSION_GREATER_THAN"
    SEMANTIC_VERSION_GREATER_EQUAL = "SEMANTIC_VERSION_GREATER_EQUAL"
    UNSPECIFIED = "CUSTOM_SIGNAL_OPERATOR_UNSPECIFIED"

    @classmethod
    def parse(cls, name: Optional[str]) -> "CustomSignalOperator":
        """Map a wire name to an operator, ``UNSPECIFIED`` when unknown."""
        try:
            return cls(name)
        except ValueError:
            return cls.UNSPECIFIED

    @property
    def is_string(self) -> bool:
        return self.value.startswith("STRING_")

    @property
    def is_numeric(self) -> bool:
        return self.value.startswith("NUMERIC_")

    @property
    def is_semantic_version(self) -> bool:
        return self.value.startswith("SEMANTIC_VERSION_")


@dataclass(frozen=True)
class TrueCondition:
    """Always true."""


@dataclass(frozen=True)
class FalseCondition:
    """Always false."""


@dataclass(frozen=True)
class OrCondition:
    """True when any child condition is true."""
    conditions: Tuple["Condition", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "conditions", tuple(self.conditions))


@dataclass(frozen=True)
class AndCondition:
    """True when every child condition is true."""
    conditions: Tuple["Condition", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "conditions", tuple(self.conditions))


@dataclass(frozen=True)
class MicroPercentRange:
    """Micro-percent interval used by the BETWEEN operator.

    The lower bound is exclusive and the upper bound inclusive.
    """
    micro_percent_lower_bound: int = 0
    micro_percent_upper_bound: int = 0


@dataclass(frozen=True)
class PercentCondition:
    """Targets a pseudo-random slice of randomization IDs.

    ``micro_percent`` is used by LESS_OR_EQUAL and GREATER_THAN,
    ``micro_percent_range`` by BETWEEN. Both are in [0, 100_000_000].
    """
    operator: PercentConditionOperator
    seed: str = ""
    micro_percent: int = 0
    micro_percent_range: Optional[MicroPercentRange] = None


@dataclass(frozen=True)
class CustomSignalCondition:
    """Compares a context signal against target values."""
    custom_signal_key: str
    operator: CustomSignalOperator
    target_custom_signal_values: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(
            self, "target_custom_signal_values", tuple(self.target_custom_signal_values)
        )


@dataclass(frozen=True)
class MalformedCondition:
    """Placeholder for a wire node that did not carry exactly one variant."""
    reason: str = ""


Condition = Union[
    TrueCondition,
    FalseCondition,
    OrCondition,
    AndCondition,
    PercentCondition,
    CustomSignalCondition,
    MalformedCondition,
]


@dataclass(frozen=True)
class ServerCondition:
    """A named, top-level condition. List position sets its priority."""
    name: str
    condition: Condition

    def __post_init__(self):
        if not self.name:
            raise InvalidArgumentError("Condition name must not be empty.")
