"""
CRM Customer Conformer

Bronze customer master rows contain duplicate versions of the same customer
(one row per edit in the source CRM), padded names and one-letter codes. The
silver table holds exactly one row per customer id: the most recent version.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from ..common.coercion import as_date
from ..common.lookups import NOT_AVAILABLE, code_map, lookup, trim
from ..common.partitions import latest, partition_by
from .base import Conformer, Row
from .quality import QualityIssue, check_allowed_values, check_primary_key

logger = logging.getLogger(__name__)

MARITAL_STATUS_RULES = code_map({'S': 'Single', 'M': 'Married'})
GENDER_RULES = code_map({'F': 'Female', 'M': 'Male'})

VALID_MARITAL_STATUSES = {'Single', 'Married', NOT_AVAILABLE}
VALID_GENDERS = {'Female', 'Male', NOT_AVAILABLE}


@dataclass
class CustomerConformer(Conformer):
    """Deduplicate and standardize CRM customers (crm_cust_info)."""

    name = 'customers'
    columns = (
        'cst_id',
        'cst_key',
        'cst_firstname',
        'cst_lastname',
        'cst_marital_status',
        'cst_gndr',
        'cst_create_date',
    )
    text_columns = ('cst_key', 'cst_firstname', 'cst_lastname')

    def conform(self, rows: Iterable[Mapping[str, Any]]) -> list[Row]:
        """
        Keep the latest version of each customer and standardize its fields.

        Rows without cst_id cannot be keyed and are dropped. Among rows sharing
        a cst_id, the one with the latest cst_create_date wins; ties keep the
        first row encountered, and a null creation date loses to any date.

        Args:
            rows: Bronze crm_cust_info rows

        Returns:
            One silver row per distinct non-null cst_id
        """
        keyed = [row for row in rows if row.get('cst_id') is not None]
        partitions = partition_by(keyed, key=lambda row: row['cst_id'])

        conformed = []
        for versions in partitions.values():
            current = latest(versions, order_by=lambda row: as_date(row.get('cst_create_date')))
            conformed.append(self._standardize(current))

        logger.debug(
            "Deduplicated customers",
            extra={
                'input_rows': len(keyed),
                'customers': len(conformed),
                'duplicates_dropped': len(keyed) - len(conformed),
            }
        )
        return conformed

    def _standardize(self, row: Mapping[str, Any]) -> Row:
        return {
            'cst_id': row['cst_id'],
            'cst_key': trim(row.get('cst_key')),
            'cst_firstname': trim(row.get('cst_firstname')),
            'cst_lastname': trim(row.get('cst_lastname')),
            'cst_marital_status': lookup(row.get('cst_marital_status'), MARITAL_STATUS_RULES),
            'cst_gndr': lookup(row.get('cst_gndr'), GENDER_RULES),
            'cst_create_date': as_date(row.get('cst_create_date')),
        }

    def quality_checks(self, rows: list[Row]) -> list[QualityIssue]:
        table = self.tables.target
        return (
            super().quality_checks(rows)
            + check_primary_key(table, rows, 'cst_id')
            + check_allowed_values(table, rows, 'cst_marital_status', VALID_MARITAL_STATUSES)
            + check_allowed_values(table, rows, 'cst_gndr', VALID_GENDERS)
        )
