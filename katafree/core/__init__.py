"""
Core utilities shared across the katafree API.

This package hosts:
- configuration helpers (env vars, paths, feature flags)
- cross-cutting services such as logging, credentials, identifiers,
  error types and rate limit helpers.

Repositories, services and routers depend on these primitives instead of
reading os.environ or configuring logging themselves.
"""
