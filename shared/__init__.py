"""
Shared utilities for the remote config engine.

This package aggregates common building blocks consumed by the service
packages:

- config: Engine configuration via pydantic-settings
- logging: Structured logging with evaluation correlation
- errors: Canonical error types and responses

Do not import from service_* packages into shared/.
"""
