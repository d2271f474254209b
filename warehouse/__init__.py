"""Data Warehouse Silver Layer Package.

This package contains the services that turn raw ("bronze") CRM and ERP
extracts into the conformed ("silver") schema:
- common: pure helpers shared by every conformer (lookups, partitions, coercion)
- conformer: per-entity conformers, quality checks, loader and CLI
"""

__version__ = "0.1.0"
