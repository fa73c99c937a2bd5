"""
Server template data and its JSON codec.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from shared.errors import InvalidArgumentError, TemplateParseError
from shared.logging import get_logger

from ..conditions.models import (
    AndCondition, Condition, CustomSignalCondition, CustomSignalOperator,
    FalseCondition, MalformedCondition, MicroPercentRange, OrCondition,
    PercentCondition, PercentConditionOperator, ServerCondition, TrueCondition
)
from ..conditions.percentile import MICRO_PERCENT_MAX
from ..diagnostics import AnomalyCode, report
from ..parameters.models import (
    ExplicitValue, InAppDefaultValue, Parameter, ParameterGroup,
    ParameterValue, PersonalizationValue, RolloutValue
)
from .schema import (
    ConditionListSchema, CustomSignalConditionSchema, MicroPercentRangeSchema,
    OneOfConditionSchema, ParameterGroupSchema, ParameterSchema,
    ParameterValueSchema, PercentConditionSchema, PersonalizationValueSchema,
    RolloutValueSchema, ServerConditionSchema, ServerTemplateSchema
)

logger = get_logger("remote_config.template")

MAX_SEED_LENGTH = 32


@dataclass(frozen=True)
class ServerTemplateData:
    """Immutable, parsed server template.

    ``conditions`` keeps the template order, which is the priority order
    used when resolving parameters.
    """
    conditions: Tuple[ServerCondition, ...] = ()
    parameters: Mapping[str, Parameter] = field(default_factory=dict)
    parameter_groups: Mapping[str, ParameterGroup] = field(default_factory=dict)
    version: Optional[Mapping[str, Any]] = None
    etag: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "conditions", tuple(self.conditions))
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))
        object.__setattr__(
            self, "parameter_groups", MappingProxyType(dict(self.parameter_groups))
        )
        if self.version is not None:
            object.__setattr__(self, "version", MappingProxyType(dict(self.version)))

    @property
    def condition_names(self) -> List[str]:
        return [condition.name for condition in self.conditions]

    @property
    def version_number(self) -> Optional[str]:
        if not self.version:
            return None
        number = self.version.get("versionNumber")
        return str(number) if number is not None else None

    def all_parameters(self) -> Dict[str, Parameter]:
        """Top-level parameters plus the ones declared inside groups."""
        merged: Dict[str, Parameter] = {}
        for group_name, group in self.parameter_groups.items():
            for key, parameter in group.parameters.items():
                if key in merged:
                    logger.warning("Parameter declared in several groups", parameter=key, group=group_name)
                    continue
                merged[key] = parameter
        for key, parameter in self.parameters.items():
            if key in merged:
                logger.warning("Parameter declared both in a group and at top level", parameter=key)
            merged[key] = parameter
        return merged

    @classmethod
    def from_json(cls, json_string: str) -> "ServerTemplateData":
        """Parse a server template JSON string.

        Raises:
            InvalidArgumentError: if ``json_string`` is empty.
            TemplateParseError: if the JSON is malformed or does not fit
                the template schema.
        """
        if not json_string:
            raise InvalidArgumentError("JSON String must not be null or empty.")
        try:
            schema = ServerTemplateSchema.model_validate_json(json_string)
        except ValidationError as e:
            logger.error("Unable to parse server template", errors=e.error_count())
            raise TemplateParseError(details={"errors": e.errors(include_url=False)}) from e
        return cls.from_schema(schema)

    @classmethod
    def from_schema(cls, schema: ServerTemplateSchema) -> "ServerTemplateData":
        return cls(
            conditions=[
                ServerCondition(name=item.name, condition=_condition_from_schema(item.condition))
                for item in schema.conditions
            ],
            parameters={
                key: _parameter_from_schema(value) for key, value in schema.parameters.items()
            },
            parameter_groups={
                key: ParameterGroup(
                    description=group.description,
                    parameters={
                        name: _parameter_from_schema(value)
                        for name, value in group.parameters.items()
                    },
                )
                for key, group in schema.parameter_groups.items()
            },
            version=schema.version,
            etag=schema.etag,
        )

    def to_schema(self) -> ServerTemplateSchema:
        return ServerTemplateSchema(
            parameters={
                key: _parameter_to_schema(value) for key, value in self.parameters.items()
            },
            conditions=[
                ServerConditionSchema(
                    name=item.name, condition=_condition_to_schema(item.condition)
                )
                for item in self.conditions
            ],
            parameter_groups={
                key: ParameterGroupSchema(
                    description=group.description,
                    parameters={
                        name: _parameter_to_schema(value)
                        for name, value in group.parameters.items()
                    },
                )
                for key, group in self.parameter_groups.items()
            },
            version=dict(self.version) if self.version is not None else None,
            etag=self.etag,
        )

    def to_json(self) -> str:
        return self.to_schema().model_dump_json(by_alias=True, exclude_none=True)


def _condition_from_schema(node: OneOfConditionSchema) -> Condition:
    populated = [
        name for name in ("or_condition", "and_condition", "true", "false", "percent", "custom_signal")
        if getattr(node, name) is not None
    ]
    if len(populated) != 1:
        reason = "no condition set" if not populated else f"several conditions set: {populated}"
        logger.warning("Invalid condition node in template", reason=reason)
        return MalformedCondition(reason=reason)

    if node.or_condition is not None:
        return OrCondition([_condition_from_schema(child) for child in node.or_condition.conditions])

    if node.and_condition is not None:
        return AndCondition([_condition_from_schema(child) for child in node.and_condition.conditions])

    if node.true is not None:
        return TrueCondition()

    if node.false is not None:
        return FalseCondition()

    if node.percent is not None:
        percent = node.percent
        percent_range = None
        if percent.micro_percent_range is not None:
            percent_range = MicroPercentRange(
                micro_percent_lower_bound=percent.micro_percent_range.micro_percent_lower_bound or 0,
                micro_percent_upper_bound=percent.micro_percent_range.micro_percent_upper_bound or 0,
            )
        condition = PercentCondition(
            operator=PercentConditionOperator.parse(percent.percent_operator),
            seed=percent.seed or "",
            micro_percent=percent.micro_percent or 0,
            micro_percent_range=percent_range,
        )
        _check_percent_condition(condition)
        return condition

    signal = node.custom_signal
    return CustomSignalCondition(
        custom_signal_key=signal.custom_signal_key or "",
        operator=CustomSignalOperator.parse(signal.custom_signal_operator),
        target_custom_signal_values=signal.target_custom_signal_values,
    )


def _check_percent_condition(condition: PercentCondition) -> None:
    """Warn about percent data outside the documented bounds.

    The condition is kept as is. Out-of-range bounds simply match everyone
    or no one.
    """
    bounds = {"micro_percent": condition.micro_percent}
    if condition.micro_percent_range is not None:
        bounds["micro_percent_lower_bound"] = condition.micro_percent_range.micro_percent_lower_bound
        bounds["micro_percent_upper_bound"] = condition.micro_percent_range.micro_percent_upper_bound

    for field_name, bound in bounds.items():
        if not 0 <= bound <= MICRO_PERCENT_MAX:
            report(
                logger, None, AnomalyCode.INVALID_PERCENT_CONDITION,
                "Percent condition bound out of range",
                field=field_name, bound=bound
            )

    seed = condition.seed
    if len(seed) > MAX_SEED_LENGTH or not seed.isascii():
        report(
            logger, None, AnomalyCode.INVALID_PERCENT_CONDITION,
            "Percent condition seed must be at most 32 ASCII characters",
            seed=seed
        )


def _condition_to_schema(condition: Condition) -> OneOfConditionSchema:
    if isinstance(condition, OrCondition):
        return OneOfConditionSchema(or_condition=ConditionListSchema(
            conditions=[_condition_to_schema(child) for child in condition.conditions]
        ))

    if isinstance(condition, AndCondition):
        return OneOfConditionSchema(and_condition=ConditionListSchema(
            conditions=[_condition_to_schema(child) for child in condition.conditions]
        ))

    if isinstance(condition, TrueCondition):
        return OneOfConditionSchema(true={})

    if isinstance(condition, FalseCondition):
        return OneOfConditionSchema(false={})

    if isinstance(condition, PercentCondition):
        percent_range = None
        if condition.micro_percent_range is not None:
            percent_range = MicroPercentRangeSchema(
                micro_percent_lower_bound=condition.micro_percent_range.micro_percent_lower_bound,
                micro_percent_upper_bound=condition.micro_percent_range.micro_percent_upper_bound,
            )
        return OneOfConditionSchema(percent=PercentConditionSchema(
            percent_operator=condition.operator.value,
            micro_percent=condition.micro_percent,
            micro_percent_range=percent_range,
            seed=condition.seed,
        ))

    if isinstance(condition, CustomSignalCondition):
        return OneOfConditionSchema(custom_signal=CustomSignalConditionSchema(
            custom_signal_operator=condition.operator.value,
            custom_signal_key=condition.custom_signal_key,
            target_custom_signal_values=list(condition.target_custom_signal_values),
        ))

    return OneOfConditionSchema()


def _parameter_value_from_schema(value: ParameterValueSchema) -> ParameterValue:
    if value.use_in_app_default:
        return InAppDefaultValue()
    if value.rollout_value is not None:
        rollout = value.rollout_value
        return RolloutValue(
            rollout_id=rollout.rollout_id or "",
            value=rollout.value,
            percent=rollout.percent or 0,
        )
    if value.personalization_value is not None:
        return PersonalizationValue(
            personalization_id=value.personalization_value.personalization_id or ""
        )
    return ExplicitValue(value.value or "")


def _parameter_value_to_schema(value: ParameterValue) -> ParameterValueSchema:
    if isinstance(value, InAppDefaultValue):
        return ParameterValueSchema(use_in_app_default=True)
    if isinstance(value, RolloutValue):
        return ParameterValueSchema(rollout_value=RolloutValueSchema(
            rollout_id=value.rollout_id, value=value.value, percent=value.percent
        ))
    if isinstance(value, PersonalizationValue):
        return ParameterValueSchema(personalization_value=PersonalizationValueSchema(
            personalization_id=value.personalization_id
        ))
    return ParameterValueSchema(value=value.value)


def _parameter_from_schema(parameter: ParameterSchema) -> Parameter:
    default_value = None
    if parameter.default_value is not None:
        default_value = _parameter_value_from_schema(parameter.default_value)
    return Parameter(
        default_value=default_value,
        conditional_values={
            name: _parameter_value_from_schema(value)
            for name, value in parameter.conditional_values.items()
        },
        description=parameter.description,
        value_type=parameter.value_type or "STRING",
    )


def _parameter_to_schema(parameter: Parameter) -> ParameterSchema:
    default_value = None
    if parameter.default_value is not None:
        default_value = _parameter_value_to_schema(parameter.default_value)
    return ParameterSchema(
        default_value=default_value,
        conditional_values={
            name: _parameter_value_to_schema(value)
            for name, value in parameter.conditional_values.items()
        },
        description=parameter.description,
        value_type=parameter.value_type,
    )
