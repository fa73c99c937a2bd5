"""
Conditions package.

Defines the condition tree used by server templates and the engine that
evaluates it against a context. Named conditions are evaluated in template
order and each one yields a definite boolean.

Modules of interest:
- models: Condition variants and operator enums.
- percentile: SHA-256 based micro-percentile bucketing.
- comparators: String, numeric and semantic version signal comparison.
- evaluator: Recursive evaluation with a bounded nesting depth.
"""
