"""
Shared utilities for the Access Layer policy reader.

This package aggregates common building blocks:

- config: Configuration via pydantic-settings
- logging: Structured logging with structlog
- errors: Canonical error types and responses

Any cross-package logic should live here to avoid import cycles.
Do not import from service_* packages into shared/.
"""
