"""
Parameter data models for Remote Config.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Union


@dataclass(frozen=True)
class ExplicitValue:
    """A concrete string value set in the template."""
    value: str


@dataclass(frozen=True)
class InAppDefaultValue:
    """Defer to the value bundled with the client."""


@dataclass(frozen=True)
class RolloutValue:
    """Value served through a rollout."""
    rollout_id: str
    value: Optional[str] = None
    percent: int = 0


@dataclass(frozen=True)
class PersonalizationValue:
    """Value chosen by a personalization, opaque to in-process evaluation."""
    personalization_id: str


ParameterValue = Union[ExplicitValue, InAppDefaultValue, RolloutValue, PersonalizationValue]


def _freeze(values: Mapping) -> Mapping:
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True)
class Parameter:
    """A template parameter.

    ``conditional_values`` is keyed by condition name. Which entry applies
    is decided by the template's condition order, not by this mapping's
    order.
    """
    default_value: Optional[ParameterValue] = None
    conditional_values: Mapping[str, ParameterValue] = field(default_factory=dict)
    description: Optional[str] = None
    value_type: str = "STRING"

    def __post_init__(self):
        object.__setattr__(self, "conditional_values", _freeze(self.conditional_values))


@dataclass(frozen=True)
class ParameterGroup:
    """A named bundle of parameters."""
    description: Optional[str] = None
    parameters: Mapping[str, Parameter] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "parameters", _freeze(self.parameters))
