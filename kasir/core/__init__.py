"""
Core utilities shared across the Kasir backend.

This package hosts configuration (env vars, paths, feature flags), the
structlog setup and the error classes used by services and routers.
"""
