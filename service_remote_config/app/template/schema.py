"""
Wire schema for server template JSON.

These pydantic models mirror the JSON exchanged with the template source.
They are only a (de)serialisation layer: evaluation works on the frozen
models from ``conditions.models`` and ``parameters.models``.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    """Base for wire models: camelCase aliases, unknown fields ignored."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class MicroPercentRangeSchema(WireModel):
    micro_percent_lower_bound: Optional[int] = Field(None, alias="microPercentLowerBound")
    micro_percent_upper_bound: Optional[int] = Field(None, alias="microPercentUpperBound")


class PercentConditionSchema(WireModel):
    percent_operator: Optional[str] = Field(None, alias="percentOperator")
    micro_percent: Optional[int] = Field(None, alias="microPercent")
    micro_percent_range: Optional[MicroPercentRangeSchema] = Field(None, alias="microPercentRange")
    seed: Optional[str] = None


class CustomSignalConditionSchema(WireModel):
    custom_signal_operator: Optional[str] = Field(None, alias="customSignalOperator")
    custom_signal_key: Optional[str] = Field(None, alias="customSignalKey")
    target_custom_signal_values: List[str] = Field(
        default_factory=list, alias="targetCustomSignalValues"
    )


class ConditionListSchema(WireModel):
    conditions: List["OneOfConditionSchema"] = Field(default_factory=list)


class OneOfConditionSchema(WireModel):
    """A condition node. Exactly one field is expected to be set."""
    or_condition: Optional[ConditionListSchema] = Field(None, alias="orCondition")
    and_condition: Optional[ConditionListSchema] = Field(None, alias="andCondition")
    true: Optional[Dict[str, Any]] = None
    false: Optional[Dict[str, Any]] = None
    percent: Optional[PercentConditionSchema] = None
    custom_signal: Optional[CustomSignalConditionSchema] = Field(None, alias="customSignal")


ConditionListSchema.model_rebuild()
OneOfConditionSchema.model_rebuild()


class ServerConditionSchema(WireModel):
    name: str = Field(..., min_length=1)
    condition: OneOfConditionSchema = Field(default_factory=OneOfConditionSchema)


class RolloutValueSchema(WireModel):
    rollout_id: Optional[str] = Field(None, alias="rolloutId")
    value: Optional[str] = None
    percent: Optional[int] = None


class PersonalizationValueSchema(WireModel):
    personalization_id: Optional[str] = Field(None, alias="personalizationId")


class ParameterValueSchema(WireModel):
    value: Optional[str] = None
    use_in_app_default: Optional[bool] = Field(None, alias="useInAppDefault")
    rollout_value: Optional[RolloutValueSchema] = Field(None, alias="rolloutValue")
    personalization_value: Optional[PersonalizationValueSchema] = Field(
        None, alias="personalizationValue"
    )


class ParameterSchema(WireModel):
    default_value: Optional[ParameterValueSchema] = Field(None, alias="defaultValue")
    conditional_values: Dict[str, ParameterValueSchema] = Field(
        default_factory=dict, alias="conditionalValues"
    )
    description: Optional[str] = None
    value_type: Optional[str] = Field(None, alias="valueType")


class ParameterGroupSchema(WireModel):
    description: Optional[str] = None
    parameters: Dict[str, ParameterSchema] = Field(default_factory=dict)


class ServerTemplateSchema(WireModel):
    parameters: Dict[str, ParameterSchema] = Field(default_factory=dict)
    conditions: List[ServerConditionSchema] = Field(default_factory=list)
    parameter_groups: Dict[str, ParameterGroupSchema] = Field(
        default_factory=dict, alias="parameterGroups"
    )
    version: Optional[Dict[str, Any]] = None
    etag: Optional[str] = None
