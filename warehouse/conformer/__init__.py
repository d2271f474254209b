"""
Silver Conformer Service

This service rebuilds the silver layer from the bronze CRM and ERP extracts.

Key responsibilities:
- Read full bronze snapshots (bronze.crm_*, bronze.erp_*)
- Deduplicate, normalize and reconcile each entity with a pure conformer
- Report data quality issues found in the conformed rows
- Truncate and reload each silver table in its own transaction
"""

__version__ = "0.1.0"
