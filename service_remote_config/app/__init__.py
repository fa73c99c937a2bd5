"""
Remote Config service package.

Resolves server-side remote config templates against a caller supplied
evaluation context. It provides:

- app.context: Immutable signal key/value context for one evaluation.
- app.conditions: Condition model, percentile hashing, signal comparators
  and the recursive condition evaluator.
- app.parameters: Parameter model and the priority-ordered resolver.
- app.config: Typed values and the resolved configuration accessor.
- app.template: Wire schema and codec for server template JSON.
- app.server_template: Facade tying the pieces together.

Guidelines:
- Evaluation is stateless and never performs I/O.
- Templates are immutable once parsed; evaluation never mutates them.
- Bad template data degrades to defaults and is logged, it never raises.
"""
