"""
Common utilities shared across the silver conformers.

This package is intentionally small and focused on pure, dependency-light
helpers: ordered lookup dispatch, per-key partitioning and bronze value
coercion.
"""
