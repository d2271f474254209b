"""
ERP Customer Demographics Conformer

Aligns ERP customer ids with the CRM alternate key (cst_key), drops
impossible birth dates and standardizes gender spellings.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Mapping, Optional

from ..common.coercion import as_date
from ..common.lookups import NOT_AVAILABLE, code_in, lookup, trim
from .base import Conformer, Row
from .quality import QualityIssue, check_allowed_values, check_date_range

logger = logging.getLogger(__name__)

DEFAULT_ID_PREFIX = 'NAS'
DEFAULT_MIN_BIRTH_DATE = date(1926, 1, 1)

GENDER_RULES = [
    (code_in('F', 'FEMALE'), 'Female'),
    (code_in('M', 'MALE'), 'Male'),
]

VALID_GENDERS = {'Female', 'Male', NOT_AVAILABLE}


def strip_prefix(customer_id: Optional[str], prefix: str) -> Optional[str]:
    """
    Remove a literal, case-sensitive prefix from a customer id.

    Examples:
        >>> strip_prefix('NASAW00011000', 'NAS')
        'AW00011000'
        >>> strip_prefix('nasAW00011000', 'NAS')
        'nasAW00011000'
    """
    if customer_id is None or not prefix:
        return customer_id
    if customer_id.startswith(prefix):
        return customer_id[len(prefix):]
    return customer_id


@dataclass
class ErpCustomerConformer(Conformer):
    """
    Conform ERP customer demographics (erp_cust_az12).

    Birth dates after `as_of` are nulled. Dates before `min_birth_date` are
    only reported by quality_checks(), never changed.
    """

    as_of: date = field(default_factory=date.today)
    id_prefix: str = DEFAULT_ID_PREFIX
    min_birth_date: date = DEFAULT_MIN_BIRTH_DATE

    name = 'erp_customers'
    columns = ('cid', 'bdate', 'gen')
    text_columns = ('cid',)

    def conform(self, rows: Iterable[Mapping[str, Any]]) -> list[Row]:
        conformed = []
        future_dates = 0

        for row in rows:
            birth_date = as_date(row.get('bdate'))
            if birth_date is not None and birth_date > self.as_of:
                future_dates += 1
                birth_date = None
            conformed.append(self._conform_row(row, birth_date))

        logger.debug(
            "Conformed ERP customers",
            extra={
                'rows': len(conformed),
                'future_birth_dates_nulled': future_dates,
                'as_of': self.as_of.isoformat(),
            }
        )
        return conformed

    def _conform_row(self, row: Mapping[str, Any], birth_date: Optional[date]) -> Row:
        return {
            'cid': strip_prefix(trim(row.get('cid')), self.id_prefix),
            'bdate': birth_date,
            'gen': lookup(row.get('gen'), GENDER_RULES),
        }

    def quality_checks(self, rows: list[Row]) -> list[QualityIssue]:
        table = self.tables.target
        return (
            super().quality_checks(rows)
            + check_date_range(table, rows, 'bdate', self.min_birth_date, self.as_of)
            + check_allowed_values(table, rows, 'gen', VALID_GENDERS)
        )
