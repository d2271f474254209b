"""Warehouse Silver Test Suite.

This package contains unit and integration tests for the silver conformer.

Test Structure:
- unit/: Conformance rules, quality checks, config, CLI and a mocked database
- integration/: Full loads against a dedicated PostgreSQL test database
"""
