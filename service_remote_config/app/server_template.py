"""
Server template facade for Remote Config.
"""

import time
from typing import Mapping, Optional, Union

from shared.errors import InvalidArgumentError
from shared.logging import evaluation_scope, get_logger

from .conditions.evaluator import ConditionEvaluator
from .config.server_config import ServerConfig
from .context import EvaluationContext
from .diagnostics import EvaluationDiagnostics
from .parameters.resolver import ParameterResolver
from .template.data import ServerTemplateData


class ServerTemplate:
    """Evaluates a cached server template for a given context.

    The template itself is never mutated. ``set`` swaps in a new parsed
    template, and each ``evaluate`` call works on the template that was
    current when it started.
    """

    def __init__(
        self,
        default_config: Optional[Mapping[str, str]] = None,
        cached_template: Optional[Union[str, ServerTemplateData]] = None,
    ):
        self.logger = get_logger("remote_config.server_template")
        self.condition_evaluator = ConditionEvaluator()
        self.parameter_resolver = ParameterResolver()
        self._default_config = dict(default_config or {})
        self._cached_template: Optional[str] = None
        self._template: Optional[ServerTemplateData] = None

        if cached_template is not None:
            self.set(cached_template)

    def set(self, template: Union[str, ServerTemplateData]) -> None:
        """Replace the cached template with a JSON string or parsed data."""
        if isinstance(template, ServerTemplateData):
            template_data = template
            template_json = template.to_json()
        else:
            template_data = ServerTemplateData.from_json(template)
            template_json = template

        self._template, self._cached_template = template_data, template_json
        self.logger.info(
            "Server template cached",
            conditions=len(template_data.conditions),
            parameters=len(template_data.parameters),
            version=template_data.version_number,
            etag=template_data.etag
        )

    def evaluate(self, context: Optional[Mapping[str, object]] = None) -> ServerConfig:
        """Resolve every parameter of the cached template for ``context``.

        Raises:
            InvalidArgumentError: if no template has been set yet.
        """
        template = self._template
        if template is None:
            raise InvalidArgumentError(
                "No Remote Config Server template in cache. Call set() before calling evaluate()."
            )

        if not isinstance(context, EvaluationContext):
            context = EvaluationContext(context or {})

        start_time = time.time()
        diagnostics = EvaluationDiagnostics()

        with evaluation_scope(template.version_number):
            evaluated_conditions = {}
            if template.conditions:
                evaluated_conditions = self.condition_evaluator.evaluate_conditions(
                    template.conditions, context, diagnostics
                )

            values = self.parameter_resolver.resolve(
                template.all_parameters(),
                evaluated_conditions,
                self._default_config,
                condition_order=template.condition_names,
                diagnostics=diagnostics,
            )

            self.logger.debug(
                "Server template evaluated",
                parameters=len(values),
                anomalies=len(diagnostics),
                evaluation_time_ms=(time.time() - start_time) * 1000
            )
        return ServerConfig(values, diagnostics.anomalies)

    def to_json(self) -> Optional[str]:
        """Serialise the cached template, ``None`` when nothing is cached."""
        template = self._template
        return template.to_json() if template is not None else None

    def get_default_config(self) -> Mapping[str, str]:
        return dict(self._default_config)

    def get_cached_template(self) -> Optional[str]:
        return self._cached_template

    @property
    def template(self) -> Optional[ServerTemplateData]:
        return self._template
