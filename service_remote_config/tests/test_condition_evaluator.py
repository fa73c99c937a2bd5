"""
Unit tests for the Remote Config condition evaluator.
"""

import pytest
from structlog.testing import capture_logs

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.errors import InvalidArgumentError
from service_remote_config.app.conditions.evaluator import (
    ConditionEvaluator, MAX_CONDITION_RECURSION_DEPTH
)
from service_remote_config.app.conditions.models import (
    AndCondition, CustomSignalCondition, CustomSignalOperator, FalseCondition,
    MalformedCondition, MicroPercentRange, OrCondition, PercentCondition,
    PercentConditionOperator, ServerCondition, TrueCondition
)
from service_remote_config.app.context import EvaluationContext
from service_remote_config.app.diagnostics import AnomalyCode, EvaluationDiagnostics


def nested_and(levels: int):
    """Wrap a TrueCondition in ``levels`` AND conditions."""
    condition = TrueCondition()
    for _ in range(levels):
        condition = AndCondition([condition])
    return condition


class TestConditionEvaluator:
    """Test cases for ConditionEvaluator."""

    @pytest.fixture
    def evaluator(self):
        """Create ConditionEvaluator instance."""
        return ConditionEvaluator()

    @pytest.fixture
    def context(self):
        """Create evaluation context."""
        return EvaluationContext({
            "randomizationId": "user-1",
            "country": "CA",
            "app_version": "1.2.0",
            "cart_total": "42.5",
        })

    def test_evaluate_conditions_keeps_template_order(self, evaluator, context):
        """Test every name is evaluated and order is preserved."""
        conditions = [
            ServerCondition("b", FalseCondition()),
            ServerCondition("a", TrueCondition()),
            ServerCondition("c", TrueCondition()),
        ]

        result = evaluator.evaluate_conditions(conditions, context)

        assert result == {"b": False, "a": True, "c": True}
        assert list(result) == ["b", "a", "c"]

    def test_evaluate_conditions_empty_list(self, evaluator, context):
        """Test an empty condition list is a contract violation."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            evaluator.evaluate_conditions([], context)

        assert exc_info.value.code == "INVALID_ARGUMENT"

    def test_evaluate_conditions_null_list(self, evaluator, context):
        """Test a missing condition list is a contract violation."""
        with pytest.raises(InvalidArgumentError):
            evaluator.evaluate_conditions(None, context)

    def test_evaluate_conditions_null_context(self, evaluator):
        """Test a missing context is a contract violation."""
        with pytest.raises(InvalidArgumentError):
            evaluator.evaluate_conditions([ServerCondition("a", TrueCondition())], None)

    @pytest.mark.parametrize("condition,expected", [
        (AndCondition([TrueCondition(), TrueCondition()]), True),
        (AndCondition([TrueCondition(), FalseCondition()]), False),
        (OrCondition([FalseCondition(), FalseCondition()]), False),
        (OrCondition([FalseCondition(), TrueCondition()]), True),
        (OrCondition([]), False),
        (OrCondition([AndCondition([TrueCondition()]), FalseCondition()]), True),
    ])
    def test_boolean_composition(self, evaluator, context, condition, expected):
        """Test AND/OR folding over children."""
        assert evaluator.evaluate_condition(condition, context) is expected

    def test_empty_and_is_false(self, evaluator, context):
        """Test an AND without children evaluates to false and is reported."""
        diagnostics = EvaluationDiagnostics()

        assert evaluator.evaluate_condition(AndCondition([]), context, 0, diagnostics) is False
        assert diagnostics.codes() == [AnomalyCode.EMPTY_AND_CONDITION]

    def test_or_short_circuits(self, evaluator, context):
        """Test OR stops at the first true child."""
        diagnostics = EvaluationDiagnostics()
        condition = OrCondition([TrueCondition(), MalformedCondition("never evaluated")])

        assert evaluator.evaluate_condition(condition, context, 0, diagnostics) is True
        assert len(diagnostics) == 0

    def test_and_short_circuits(self, evaluator, context):
        """Test AND stops at the first false child."""
        diagnostics = EvaluationDiagnostics()
        condition = AndCondition([FalseCondition(), MalformedCondition("never evaluated")])

        assert evaluator.evaluate_condition(condition, context, 0, diagnostics) is False
        assert len(diagnostics) == 0

    def test_depth_limit_allows_ten_levels(self, evaluator, context):
        """Test a leaf at the maximum depth still evaluates."""
        condition = nested_and(MAX_CONDITION_RECURSION_DEPTH)

        assert evaluator.evaluate_condition(condition, context) is True

    def test_depth_limit_exceeded(self, evaluator, context):
        """Test nesting past the maximum depth evaluates to false."""
        diagnostics = EvaluationDiagnostics()
        condition = nested_and(MAX_CONDITION_RECURSION_DEPTH + 1)

        with capture_logs() as logs:
            result = evaluator.evaluate_condition(condition, context, 0, diagnostics)

        assert result is False
        assert diagnostics.codes() == [AnomalyCode.MAX_DEPTH_EXCEEDED]
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["event"] == "Maximum condition recursion depth exceeded"

    def test_deeply_nested_tree_does_not_overflow(self, evaluator, context):
        """Test a pathological tree is cut off without recursion errors."""
        condition = nested_and(5000)

        assert evaluator.evaluate_condition(condition, context) is False

    def test_malformed_condition(self, evaluator, context):
        """Test a malformed node evaluates to false and is logged."""
        diagnostics = EvaluationDiagnostics()

        with capture_logs() as logs:
            result = evaluator.evaluate_condition(MalformedCondition("no condition set"), context, 0, diagnostics)

        assert result is False
        assert diagnostics.codes() == [AnomalyCode.MALFORMED_CONDITION]
        assert logs[0]["reason"] == "no condition set"

    def test_unknown_node_type(self, evaluator, context):
        """Test objects outside the condition union evaluate to false."""
        assert evaluator.evaluate_condition("not a condition", context) is False


class TestPercentConditions:
    """Test cases for percent conditions.

    With seed ``seed1`` the IDs ``user-1``, ``user-2`` and ``user-3`` land in
    buckets 41953865, 61296038 and 7022361.
    """

    @pytest.fixture
    def evaluator(self):
        """Create ConditionEvaluator instance."""
        return ConditionEvaluator()

    def context_for(self, randomization_id):
        return EvaluationContext({"randomizationId": randomization_id})

    @pytest.mark.parametrize("micro_percent,expected", [
        (41953865, True),
        (41953864, False),
        (100_000_000, True),
        (0, False),
    ])
    def test_less_or_equal(self, evaluator, micro_percent, expected):
        """Test LESS_OR_EQUAL is inclusive."""
        condition = PercentCondition(
            operator=PercentConditionOperator.LESS_OR_EQUAL,
            seed="seed1",
            micro_percent=micro_percent,
        )
        assert evaluator.evaluate_condition(condition, self.context_for("user-1")) is expected

    @pytest.mark.parametrize("micro_percent,expected", [
        (41953865, False),
        (41953864, True),
        (100_000_000, False),
    ])
    def test_greater_than(self, evaluator, micro_percent, expected):
        """Test GREATER_THAN is exclusive."""
        condition = PercentCondition(
            operator=PercentConditionOperator.GREATER_THAN,
            seed="seed1",
            micro_percent=micro_percent,
        )
        assert evaluator.evaluate_condition(condition, self.context_for("user-1")) is expected

    @pytest.mark.parametrize("lower,upper,expected", [
        (41953864, 41953865, True),
        (41953865, 50_000_000, False),
        (0, 41953864, False),
        (0, 100_000_000, True),
    ])
    def test_between(self, evaluator, lower, upper, expected):
        """Test BETWEEN excludes the lower bound and includes the upper."""
        condition = PercentCondition(
            operator=PercentConditionOperator.BETWEEN,
            seed="seed1",
            micro_percent_range=MicroPercentRange(lower, upper),
        )
        assert evaluator.evaluate_condition(condition, self.context_for("user-1")) is expected

    @pytest.mark.parametrize("randomization_id", ["user-1", "user-2", "user-3", "user-42"])
    @pytest.mark.parametrize("lower,upper", [(0, 10_000_000), (40_000_000, 60_000_000), (7022361, 61296038)])
    def test_between_matches_greater_than_and_less_or_equal(self, evaluator, randomization_id, lower, upper):
        """Test BETWEEN equals GREATER_THAN(lower) AND LESS_OR_EQUAL(upper)."""
        context = self.context_for(randomization_id)
        between = PercentCondition(
            operator=PercentConditionOperator.BETWEEN,
            seed="seed1",
            micro_percent_range=MicroPercentRange(lower, upper),
        )
        combined = AndCondition([
            PercentCondition(operator=PercentConditionOperator.GREATER_THAN, seed="seed1", micro_percent=lower),
            PercentCondition(operator=PercentConditionOperator.LESS_OR_EQUAL, seed="seed1", micro_percent=upper),
        ])

        assert evaluator.evaluate_condition(between, context) == evaluator.evaluate_condition(combined, context)

    def test_between_without_range(self, evaluator):
        """Test BETWEEN without a range never matches."""
        condition = PercentCondition(operator=PercentConditionOperator.BETWEEN, seed="seed1")
        assert evaluator.evaluate_condition(condition, self.context_for("user-1")) is False

    def test_unspecified_operator(self, evaluator):
        """Test the UNSPECIFIED percent operator evaluates to false."""
        condition = PercentCondition(
            operator=PercentConditionOperator.UNSPECIFIED, seed="seed1", micro_percent=100_000_000
        )
        assert evaluator.evaluate_condition(condition, self.context_for("user-1")) is False

    @pytest.mark.parametrize("operator", list(PercentConditionOperator))
    def test_missing_randomization_id(self, evaluator, operator):
        """Test percent conditions are false without randomizationId."""
        diagnostics = EvaluationDiagnostics()
        condition = PercentCondition(
            operator=operator,
            seed="seed1",
            micro_percent=100_000_000,
            micro_percent_range=MicroPercentRange(0, 100_000_000),
        )

        result = evaluator.evaluate_condition(condition, EvaluationContext({"country": "CA"}), 0, diagnostics)

        assert result is False
        assert diagnostics.codes() == [AnomalyCode.MISSING_RANDOMIZATION_ID]


class TestCustomSignalConditions:
    """Test cases for custom signal conditions."""

    @pytest.fixture
    def evaluator(self):
        """Create ConditionEvaluator instance."""
        return ConditionEvaluator()

    @pytest.fixture
    def context(self):
        """Create evaluation context."""
        return EvaluationContext({"country": "CA", "app_version": "1.2", "cart_total": "42.5"})

    def test_string_condition(self, evaluator, context):
        """Test a string operator against a context signal."""
        condition = CustomSignalCondition("country", CustomSignalOperator.STRING_EXACTLY_MATCHES, ["US", "CA"])
        assert evaluator.evaluate_condition(condition, context) is True

    def test_semantic_version_condition(self, evaluator, context):
        """Test a semantic version operator against a context signal."""
        condition = CustomSignalCondition(
            "app_version", CustomSignalOperator.SEMANTIC_VERSION_EQUAL, ["1.2.0"]
        )
        assert evaluator.evaluate_condition(condition, context) is True

    def test_missing_signal_key(self, evaluator, context):
        """Test a signal absent from the context evaluates to false."""
        condition = CustomSignalCondition("plan", CustomSignalOperator.STRING_CONTAINS, ["pro"])
        assert evaluator.evaluate_condition(condition, context) is False

    def test_empty_target_values(self, evaluator, context):
        """Test an empty target list evaluates to false and is reported."""
        diagnostics = EvaluationDiagnostics()
        condition = CustomSignalCondition("country", CustomSignalOperator.STRING_CONTAINS, [])

        assert evaluator.evaluate_condition(condition, context, 0, diagnostics) is False
        assert diagnostics.codes() == [AnomalyCode.MISSING_TARGET_VALUES]

    def test_non_numeric_target_never_raises(self, evaluator, context):
        """Test numeric comparison with a non-numeric target is false."""
        diagnostics = EvaluationDiagnostics()

        for operator in [op for op in CustomSignalOperator if op.is_numeric]:
            condition = CustomSignalCondition("cart_total", operator, ["abc"])
            assert evaluator.evaluate_condition(condition, context, 0, diagnostics) is False

        assert set(diagnostics.codes()) == {AnomalyCode.INVALID_NUMBER}

    def test_numeric_wrong_arity(self, evaluator, context):
        """Test numeric operators with two targets evaluate to false."""
        diagnostics = EvaluationDiagnostics()
        condition = CustomSignalCondition("cart_total", CustomSignalOperator.NUMERIC_GREATER_THAN, ["1", "2"])

        assert evaluator.evaluate_condition(condition, context, 0, diagnostics) is False
        assert diagnostics.codes() == [AnomalyCode.INVALID_TARGET_ARITY]
        assert diagnostics.anomalies[0].details["key"] == "cart_total"

    def test_six_segment_version_is_false(self, evaluator):
        """Test a six segment version evaluates the condition to false."""
        context = EvaluationContext({"app_version": "1.0.0.0.0.0"})
        condition = CustomSignalCondition(
            "app_version", CustomSignalOperator.SEMANTIC_VERSION_GREATER_EQUAL, ["1.0.0"]
        )
        assert evaluator.evaluate_condition(condition, context) is False

    def test_unspecified_operator(self, evaluator, context):
        """Test an unknown operator evaluates to false."""
        diagnostics = EvaluationDiagnostics()
        condition = CustomSignalCondition("country", CustomSignalOperator.parse("STRING_SOUNDS_LIKE"), ["CA"])

        assert evaluator.evaluate_condition(condition, context, 0, diagnostics) is False
        assert diagnostics.codes() == [AnomalyCode.UNSPECIFIED_OPERATOR]
