"""
Conformer Registry

Builds the set of conformers for a run from the loaded configuration. The
returned order is the conventional load order (CRM first, then ERP), which
also makes the sales reference checks possible once customers and products
are conformed. Conformers themselves do not depend on this order.
"""

from datetime import date
from typing import Optional

from .base import Conformer
from .config_loader import SilverConfig
from .customers import CustomerConformer
from .erp_categories import ErpCategoryConformer
from .erp_customers import ErpCustomerConformer
from .erp_locations import ErpLocationConformer
from .products import ProductConformer
from .sales import SalesConformer

CONFORMER_NAMES = (
    'customers',
    'products',
    'sales',
    'erp_customers',
    'erp_locations',
    'erp_categories',
)


def build_conformers(
    config: SilverConfig,
    as_of: Optional[date] = None,
    names: Optional[list[str]] = None,
) -> dict[str, Conformer]:
    """
    Instantiate conformers in load order.

    Args:
        config: Silver configuration
        as_of: Run date used by date rules (defaults to today)
        names: Optional subset of CONFORMER_NAMES to build

    Returns:
        Ordered mapping of conformer name -> conformer

    Raises:
        ValueError: If an unknown conformer name is requested
    """
    as_of = as_of or date.today()
    selected = list(CONFORMER_NAMES) if not names else names

    unknown = [name for name in selected if name not in CONFORMER_NAMES]
    if unknown:
        raise ValueError(f"Unknown conformer(s): {', '.join(unknown)}")

    tables = config.tables
    available: dict[str, Conformer] = {
        'customers': CustomerConformer(tables=tables['customers']),
        'products': ProductConformer(tables=tables['products']),
        'sales': SalesConformer(tables=tables['sales']),
        'erp_customers': ErpCustomerConformer(
            tables=tables['erp_customers'],
            as_of=as_of,
            id_prefix=config.erp_customers.id_prefix,
            min_birth_date=config.erp_customers.min_birth_date,
        ),
        'erp_locations': ErpLocationConformer(
            tables=tables['erp_locations'],
            id_separators=tuple(config.erp_locations.id_separators),
            country_aliases=config.erp_locations.country_aliases,
        ),
        'erp_categories': ErpCategoryConformer(tables=tables['erp_categories']),
    }

    return {name: available[name] for name in CONFORMER_NAMES if name in selected}
