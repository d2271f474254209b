"""
ERP Customer Location Conformer

Location ids carry separators ('AW-00011000') that the CRM key space does
not; country values mix ISO codes, full names and blanks.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from ..common.lookups import NOT_AVAILABLE, Rule, code_in, is_blank, lookup, trim
from .base import Conformer, Row

DEFAULT_ID_SEPARATORS = ('-',)
DEFAULT_COUNTRY_ALIASES = {
    'United States': ['US', 'USA'],
    'Germany': ['DE'],
}


def strip_separators(customer_id: Optional[str], separators: Iterable[str]) -> Optional[str]:
    """Remove every separator character from an id."""
    if customer_id is None:
        return None
    for separator in separators:
        customer_id = customer_id.replace(separator, '')
    return customer_id


def country_rules(aliases: Mapping[str, Iterable[str]]) -> list[Rule]:
    """
    Build the ordered country rules from a canonical name -> codes mapping.

    Recognised codes come first, in mapping order; blank or null input maps
    to n/a. Anything else is left to the caller's fallback.
    """
    rules: list[Rule] = [
        (code_in(*(code.upper() for code in codes)), canonical)
        for canonical, codes in aliases.items()
    ]
    rules.append((is_blank, NOT_AVAILABLE))
    return rules


@dataclass
class ErpLocationConformer(Conformer):
    """Conform ERP customer locations (erp_loc_a101)."""

    id_separators: tuple[str, ...] = DEFAULT_ID_SEPARATORS
    country_aliases: dict[str, list[str]] = field(default_factory=lambda: dict(DEFAULT_COUNTRY_ALIASES))

    name = 'erp_locations'
    columns = ('cid', 'cntry')
    text_columns = ('cid', 'cntry')

    def __post_init__(self):
        self._country_rules = country_rules(self.country_aliases)

    def conform(self, rows: Iterable[Mapping[str, Any]]) -> list[Row]:
        """
        Strip id separators and standardize country names.

        Unrecognised countries are passed through unchanged.
        """
        return [
            {
                'cid': strip_separators(trim(row.get('cid')), self.id_separators),
                'cntry': lookup(row.get('cntry'), self._country_rules, default=row.get('cntry')),
            }
            for row in rows
        ]
