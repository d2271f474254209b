"""
Configuration Loader for the Silver Conformer

This module loads and validates the silver layer configuration from
config/silver.yml: schema names, the bronze -> silver table mapping, and the
handful of tunable conformance constants (ERP id prefix, birth date floor,
country aliases).
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Optional

import yaml

from .base import TableMapping

logger = logging.getLogger(__name__)

DEFAULT_TABLES = {
    'customers': TableMapping(source='crm_cust_info', target='crm_cust_info'),
    'products': TableMapping(source='crm_prd_info', target='crm_prd_info'),
    'sales': TableMapping(source='crm_sales_details', target='crm_sales_details'),
    'erp_customers': TableMapping(source='erp_cust_az12', target='erp_cust_az12'),
    'erp_locations': TableMapping(source='erp_loc_a101', target='erp_loc_a101'),
    'erp_categories': TableMapping(source='erp_px_cat_g1v2', target='erp_px_cat_g1v2'),
}


@dataclass
class ErpCustomerSettings:
    """Tunables for the ERP customer conformer."""

    id_prefix: str = 'NAS'
    min_birth_date: date = date(1926, 1, 1)


@dataclass
class ErpLocationSettings:
    """Tunables for the ERP location conformer."""

    id_separators: list[str] = field(default_factory=lambda: ['-'])
    country_aliases: dict[str, list[str]] = field(default_factory=lambda: {
        'United States': ['US', 'USA'],
        'Germany': ['DE'],
    })


@dataclass
class SilverConfig:
    """Complete silver layer configuration."""

    bronze_schema: str = 'bronze'
    silver_schema: str = 'silver'
    tables: dict[str, TableMapping] = field(default_factory=lambda: dict(DEFAULT_TABLES))
    erp_customers: ErpCustomerSettings = field(default_factory=ErpCustomerSettings)
    erp_locations: ErpLocationSettings = field(default_factory=ErpLocationSettings)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "SilverConfig":
        """Create SilverConfig from dictionary, filling gaps with defaults."""
        tables = dict(DEFAULT_TABLES)
        for name, mapping in (config_dict.get('tables') or {}).items():
            if name not in DEFAULT_TABLES:
                raise ValueError(f"Unknown table '{name}' in configuration")
            if not isinstance(mapping, dict):
                raise ValueError(f"Table mapping for '{name}' must be a mapping")
            default = DEFAULT_TABLES[name]
            tables[name] = TableMapping(
                source=mapping.get('source', default.source),
                target=mapping.get('target', default.target),
            )

        customers_dict = config_dict.get('erp_customers') or {}
        erp_customers = ErpCustomerSettings(
            id_prefix=customers_dict.get('id_prefix', 'NAS'),
            min_birth_date=_parse_date(customers_dict.get('min_birth_date', date(1926, 1, 1))),
        )

        locations_dict = config_dict.get('erp_locations') or {}
        defaults = ErpLocationSettings()
        aliases = locations_dict.get('country_aliases', defaults.country_aliases)
        if not isinstance(aliases, dict):
            raise ValueError("`erp_locations.country_aliases` must be a mapping")
        erp_locations = ErpLocationSettings(
            id_separators=list(locations_dict.get('id_separators', defaults.id_separators)),
            country_aliases={str(name): [str(code) for code in codes] for name, codes in aliases.items()},
        )

        return cls(
            bronze_schema=config_dict.get('bronze_schema', 'bronze'),
            silver_schema=config_dict.get('silver_schema', 'silver'),
            tables=tables,
            erp_customers=erp_customers,
            erp_locations=erp_locations,
        )


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as e:
        raise ValueError(f"Invalid date in configuration: {value!r}") from e


def load_silver_config(config_path: Optional[str] = None) -> SilverConfig:
    """
    Load silver layer configuration from YAML file.

    Args:
        config_path: Path to silver.yml. If None, uses config/silver.yml
                     relative to the project root.

    Returns:
        SilverConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid

    Example:
        >>> config = load_silver_config('config/silver.yml')
        >>> config.tables['customers'].target
        'crm_cust_info'
    """
    if config_path is None:
        project_root = Path(__file__).parent.parent.parent
        config_path = str(project_root / "config" / "silver.yml")

    logger.info("Loading silver configuration", extra={'config_path': config_path})

    try:
        with open(config_path) as f:
            config_dict = yaml.safe_load(f)

        if not config_dict:
            logger.warning("Empty configuration file, using defaults")
            config_dict = {}

        config = SilverConfig.from_dict(config_dict)

        logger.info(
            "Silver configuration loaded successfully",
            extra={
                'bronze_schema': config.bronze_schema,
                'silver_schema': config.silver_schema,
                'tables': len(config.tables),
            }
        )

        return config

    except FileNotFoundError:
        logger.error(f"Configuration file not found: {config_path}")
        raise
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise ValueError(f"Invalid YAML in config file: {e}") from e
    except ValueError:
        raise
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise ValueError(f"Failed to load configuration: {e}") from e
