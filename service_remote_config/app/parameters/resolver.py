"""
Parameter resolution for Remote Config.
"""

from typing import Dict, Mapping, Optional, Sequence

from shared.logging import get_logger

from ..config.value import Value, ValueSource
from ..diagnostics import AnomalyCode, EvaluationDiagnostics, report
from .models import (
    ExplicitValue, InAppDefaultValue, Parameter, ParameterValue, RolloutValue
)


class ParameterResolver:
    """Picks the value of each parameter from evaluated conditions.

    For every parameter the first condition, in priority order, that is
    true and has a conditional value wins. Without a match the parameter's
    own default applies. Values the template defers or leaves empty keep
    whatever the caller's default config supplied.
    """

    def __init__(self):
        self.logger = get_logger("remote_config.parameter_resolver")

    def resolve(
        self,
        parameters: Mapping[str, Parameter],
        evaluated_conditions: Mapping[str, bool],
        default_config: Optional[Mapping[str, str]] = None,
        condition_order: Optional[Sequence[str]] = None,
        diagnostics: Optional[EvaluationDiagnostics] = None,
    ) -> Dict[str, Value]:
        """Resolve every parameter to a ``Value``.

        Args:
            parameters: Template parameters keyed by name.
            evaluated_conditions: Condition results keyed by name.
            default_config: Client-bundled fallback values.
            condition_order: Condition names from highest to lowest
                priority. Defaults to the order of ``evaluated_conditions``.
            diagnostics: Optional collector for data-quality problems.

        Returns:
            Resolved values keyed by parameter name.
        """
        resolved: Dict[str, Value] = {
            key: Value(ValueSource.DEFAULT, value)
            for key, value in (default_config or {}).items()
        }

        priority = list(condition_order) if condition_order is not None else list(evaluated_conditions)
        true_conditions = [name for name in priority if evaluated_conditions.get(name)]

        for key, parameter in parameters.items():
            derived = self._derive_conditional_value(parameter, true_conditions)

            if derived is not None:
                condition_name, parameter_value = derived
                self._apply_conditional_value(
                    resolved, key, condition_name, parameter_value, diagnostics
                )
            else:
                self._apply_default_value(resolved, key, parameter, diagnostics)

        return resolved

    def _derive_conditional_value(self, parameter: Parameter, true_conditions: Sequence[str]):
        conditional_values = parameter.conditional_values
        if not conditional_values:
            return None

        for condition_name in true_conditions:
            if condition_name in conditional_values:
                return condition_name, conditional_values[condition_name]
        return None

    def _apply_conditional_value(
        self,
        resolved: Dict[str, Value],
        key: str,
        condition_name: str,
        parameter_value: ParameterValue,
        diagnostics: Optional[EvaluationDiagnostics],
    ) -> None:
        if isinstance(parameter_value, InAppDefaultValue):
            report(
                self.logger, diagnostics, AnomalyCode.IN_APP_DEFAULT,
                "Conditional value defers to the in-app default",
                level="info", parameter=key, condition=condition_name
            )
            return

        raw = _explicit_string(parameter_value)
        if raw is None:
            report(
                self.logger, diagnostics, AnomalyCode.UNRESOLVABLE_VALUE,
                "Conditional value cannot be resolved in process",
                level="info", parameter=key, condition=condition_name,
                value_kind=type(parameter_value).__name__
            )
            return

        resolved[key] = Value(ValueSource.REMOTE, raw)

    def _apply_default_value(
        self,
        resolved: Dict[str, Value],
        key: str,
        parameter: Parameter,
        diagnostics: Optional[EvaluationDiagnostics],
    ) -> None:
        default_value = parameter.default_value

        if isinstance(default_value, InAppDefaultValue):
            report(
                self.logger, diagnostics, AnomalyCode.IN_APP_DEFAULT,
                "Default value defers to the in-app default",
                level="info", parameter=key
            )
            return

        if default_value is None:
            report(
                self.logger, diagnostics, AnomalyCode.EMPTY_DEFAULT_VALUE,
                "Parameter has no default value", parameter=key
            )
            return

        raw = _explicit_string(default_value)
        if raw is None:
            report(
                self.logger, diagnostics, AnomalyCode.UNRESOLVABLE_VALUE,
                "Default value cannot be resolved in process",
                level="info", parameter=key,
                value_kind=type(default_value).__name__
            )
            return

        if raw == "":
            report(
                self.logger, diagnostics, AnomalyCode.EMPTY_DEFAULT_VALUE,
                "Default value is empty, keeping the default config value",
                parameter=key
            )
            return

        resolved[key] = Value(ValueSource.REMOTE, raw)


def _explicit_string(parameter_value: ParameterValue) -> Optional[str]:
    """Return the concrete string a value carries, if any."""
    if isinstance(parameter_value, ExplicitValue):
        return parameter_value.value
    if isinstance(parameter_value, RolloutValue):
        return parameter_value.value
    # Personalization values are chosen server side
    return None
