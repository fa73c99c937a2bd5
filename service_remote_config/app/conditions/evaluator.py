"""
Condition evaluation engine for Remote Config.
"""

from typing import Dict, Optional, Sequence

from shared.errors import InvalidArgumentError
from shared.logging import get_logger

from ..context import RANDOMIZATION_ID_KEY, EvaluationContext
from ..diagnostics import AnomalyCode, EvaluationDiagnostics, report
from .comparators import SignalComparisonError, compare_signal
from .models import (
    AndCondition, Condition, CustomSignalCondition, FalseCondition,
    MalformedCondition, OrCondition, PercentCondition,
    PercentConditionOperator, ServerCondition, TrueCondition
)
from .percentile import get_micro_percentile

MAX_CONDITION_RECURSION_DEPTH = 10


class ConditionEvaluator:
    """Evaluates server conditions against an evaluation context.

    The evaluator keeps no per-call state, so one instance can serve
    concurrent evaluations.
    """

    def __init__(self, max_depth: int = MAX_CONDITION_RECURSION_DEPTH):
        self.logger = get_logger("remote_config.condition_evaluator")
        self.max_depth = max_depth

    def evaluate_conditions(
        self,
        conditions: Sequence[ServerCondition],
        context: EvaluationContext,
        diagnostics: Optional[EvaluationDiagnostics] = None,
    ) -> Dict[str, bool]:
        """Evaluate every named condition.

        Returns:
            A dict of condition name to result, in template order.

        Raises:
            InvalidArgumentError: if ``conditions`` is empty or ``context``
                is missing.
        """
        if conditions is None:
            raise InvalidArgumentError("List of conditions must not be null.")
        if not conditions:
            raise InvalidArgumentError("List of conditions must not be empty.")
        if context is None:
            raise InvalidArgumentError("Context must not be null.")

        evaluated: Dict[str, bool] = {}
        for server_condition in conditions:
            evaluated[server_condition.name] = self.evaluate_condition(
                server_condition.condition, context, 0, diagnostics
            )

        self.logger.debug(
            "Conditions evaluated",
            total=len(evaluated),
            true_conditions=[name for name, result in evaluated.items() if result]
        )
        return evaluated

    def evaluate_condition(
        self,
        condition: Condition,
        context: EvaluationContext,
        depth: int = 0,
        diagnostics: Optional[EvaluationDiagnostics] = None,
    ) -> bool:
        """Evaluate a single condition node at ``depth``."""
        if depth > self.max_depth:
            report(
                self.logger, diagnostics, AnomalyCode.MAX_DEPTH_EXCEEDED,
                "Maximum condition recursion depth exceeded",
                max_depth=self.max_depth
            )
            return False

        if isinstance(condition, TrueCondition):
            return True

        elif isinstance(condition, FalseCondition):
            return False

        elif isinstance(condition, OrCondition):
            return self._evaluate_or_condition(condition, context, depth, diagnostics)

        elif isinstance(condition, AndCondition):
            return self._evaluate_and_condition(condition, context, depth, diagnostics)

        elif isinstance(condition, PercentCondition):
            return self._evaluate_percent_condition(condition, context, diagnostics)

        elif isinstance(condition, CustomSignalCondition):
            return self._evaluate_custom_signal_condition(condition, context, diagnostics)

        reason = condition.reason if isinstance(condition, MalformedCondition) else type(condition).__name__
        report(
            self.logger, diagnostics, AnomalyCode.MALFORMED_CONDITION,
            "Invalid condition node", reason=reason
        )
        return False

    def _evaluate_or_condition(
        self,
        condition: OrCondition,
        context: EvaluationContext,
        depth: int,
        diagnostics: Optional[EvaluationDiagnostics],
    ) -> bool:
        for sub_condition in condition.conditions:
            # Short-circuit on the first true child
            if self.evaluate_condition(sub_condition, context, depth + 1, diagnostics):
                return True
        return False

    def _evaluate_and_condition(
        self,
        condition: AndCondition,
        context: EvaluationContext,
        depth: int,
        diagnostics: Optional[EvaluationDiagnostics],
    ) -> bool:
        if not condition.conditions:
            report(
                self.logger, diagnostics, AnomalyCode.EMPTY_AND_CONDITION,
                "AND condition without sub-conditions evaluates to false"
            )
            return False

        for sub_condition in condition.conditions:
            # Short-circuit on the first false child
            if not self.evaluate_condition(sub_condition, context, depth + 1, diagnostics):
                return False
        return True

    def _evaluate_percent_condition(
        self,
        condition: PercentCondition,
        context: EvaluationContext,
        diagnostics: Optional[EvaluationDiagnostics],
    ) -> bool:
        randomization_id = context.get(RANDOMIZATION_ID_KEY)
        if randomization_id is None:
            report(
                self.logger, diagnostics, AnomalyCode.MISSING_RANDOMIZATION_ID,
                "Percentage operation must not be performed without randomizationId"
            )
            return False

        micro_percentile = get_micro_percentile(condition.seed, randomization_id)
        percent_range = condition.micro_percent_range

        if condition.operator == PercentConditionOperator.LESS_OR_EQUAL:
            return micro_percentile <= condition.micro_percent

        elif condition.operator == PercentConditionOperator.GREATER_THAN:
            return micro_percentile > condition.micro_percent

        elif condition.operator == PercentConditionOperator.BETWEEN:
            lower = percent_range.micro_percent_lower_bound if percent_range else 0
            upper = percent_range.micro_percent_upper_bound if percent_range else 0
            return lower < micro_percentile <= upper

        report(
            self.logger, diagnostics, AnomalyCode.UNSPECIFIED_OPERATOR,
            "Unspecified percent operator", operator=condition.operator.value
        )
        return False

    def _evaluate_custom_signal_condition(
        self,
        condition: CustomSignalCondition,
        context: EvaluationContext,
        diagnostics: Optional[EvaluationDiagnostics],
    ) -> bool:
        key = condition.custom_signal_key
        target_values = condition.target_custom_signal_values

        if not target_values:
            report(
                self.logger, diagnostics, AnomalyCode.MISSING_TARGET_VALUES,
                "Values must be assigned to all custom signal fields",
                operator=condition.operator.value, key=key
            )
            return False

        signal_value = context.get(key)
        if signal_value is None:
            return False

        try:
            return compare_signal(condition.operator, signal_value, target_values)
        except SignalComparisonError as e:
            details = {"operator": condition.operator.value, "key": key, **e.details}
            report(self.logger, diagnostics, e.code, e.message, **details)
            return False
