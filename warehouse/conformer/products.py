"""
CRM Product Conformer

Each bronze product row is one historical revision of a product. The raw
product key packs two pieces of information:

    CO-RF-FR-R92B-58
    ^^^^^ ^^^^^^^^^^
    |     product key (joins to sales lines)
    category id (joins to the ERP category table, which uses '_')

The source end dates are unreliable (overlapping or ending before they
start), so validity intervals are rebuilt from the start dates: every
revision ends the day before the next revision of the same key starts, and
the most recent revision stays open-ended.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Iterable, Mapping, Optional

from ..common.coercion import as_date, as_int
from ..common.lookups import NOT_AVAILABLE, code_map, lookup, trim
from ..common.partitions import partition_by, with_next
from .base import Conformer, Row
from .quality import (
    QualityIssue,
    check_allowed_values,
    check_date_order,
    check_negative,
    check_primary_key,
)

logger = logging.getLogger(__name__)

CATEGORY_LENGTH = 5
CATEGORY_SEPARATOR = '-'
# The product key starts after the category and the separator following it
PRODUCT_KEY_OFFSET = CATEGORY_LENGTH + 1

PRODUCT_LINE_RULES = code_map({
    'M': 'Mountain',
    'R': 'Road',
    'S': 'Other Sales',
    'T': 'Touring',
})

VALID_PRODUCT_LINES = {'Mountain', 'Road', 'Other Sales', 'Touring', NOT_AVAILABLE}


def split_product_key(raw_key: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """
    Split a raw product key into (category id, product key).

    Examples:
        >>> split_product_key('CO-RF-FR-R92B-58')
        ('CO_RF', 'FR-R92B-58')
        >>> split_product_key(None)
        (None, None)
    """
    if raw_key is None:
        return None, None
    category = raw_key[:CATEGORY_LENGTH].replace(CATEGORY_SEPARATOR, '_')
    return category, raw_key[PRODUCT_KEY_OFFSET:]


@dataclass
class ProductConformer(Conformer):
    """Derive keys and rebuild validity intervals for CRM products (crm_prd_info)."""

    name = 'products'
    columns = (
        'prd_id',
        'cat_id',
        'prd_key',
        'prd_nm',
        'prd_cost',
        'prd_line',
        'prd_start_dt',
        'prd_end_dt',
    )
    text_columns = ('cat_id', 'prd_key', 'prd_nm')

    def conform(self, rows: Iterable[Mapping[str, Any]]) -> list[Row]:
        """
        Standardize every product revision and repair its end date.

        Revisions are partitioned by raw product key and ordered by start
        date ascending. Output keeps the input row order.

        Args:
            rows: Bronze crm_prd_info rows

        Returns:
            One silver row per input row
        """
        rows = list(rows)
        standardized = [self._standardize(row) for row in rows]

        # Partition on the raw key, indices keep output aligned with the input
        partitions = partition_by(
            range(len(rows)),
            key=lambda index: trim(rows[index].get('prd_key')),
        )

        for indices in partitions.values():
            pairs = with_next(indices, order_by=lambda index: standardized[index]['prd_start_dt'])
            for index, next_index in pairs:
                standardized[index]['prd_end_dt'] = self._end_date(
                    None if next_index is None else standardized[next_index]['prd_start_dt']
                )

        logger.debug(
            "Rebuilt product validity intervals",
            extra={
                'revisions': len(standardized),
                'product_keys': len(partitions),
            }
        )
        return standardized

    @staticmethod
    def _end_date(next_start):
        if next_start is None:
            return None
        return next_start - timedelta(days=1)

    def _standardize(self, row: Mapping[str, Any]) -> Row:
        category, product_key = split_product_key(trim(row.get('prd_key')))
        cost = as_int(row.get('prd_cost'))

        return {
            'prd_id': row.get('prd_id'),
            'cat_id': category,
            'prd_key': product_key,
            'prd_nm': trim(row.get('prd_nm')),
            'prd_cost': 0 if cost is None else cost,
            'prd_line': lookup(row.get('prd_line'), PRODUCT_LINE_RULES),
            'prd_start_dt': as_date(row.get('prd_start_dt')),
            'prd_end_dt': None,
        }

    def quality_checks(self, rows: list[Row]) -> list[QualityIssue]:
        table = self.tables.target
        return (
            super().quality_checks(rows)
            + check_primary_key(table, rows, 'prd_id')
            + check_negative(table, rows, 'prd_cost')
            + check_allowed_values(table, rows, 'prd_line', VALID_PRODUCT_LINES)
            + check_date_order(table, rows, 'prd_start_dt', 'prd_end_dt')
        )
