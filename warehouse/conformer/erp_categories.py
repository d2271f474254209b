"""
ERP Product Category Conformer

The category reference table is already clean in the source, so it is
loaded verbatim. The only contract is the untrimmed-text quality check,
which reports padding but does not remove it.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .base import Conformer, Row


@dataclass
class ErpCategoryConformer(Conformer):
    """Pass ERP product categories (erp_px_cat_g1v2) through unchanged."""

    name = 'erp_categories'
    columns = ('id', 'cat', 'subcat', 'maintenance')
    text_columns = ('id', 'cat', 'subcat', 'maintenance')

    def conform(self, rows: Iterable[Mapping[str, Any]]) -> list[Row]:
        return [self.project(row) for row in rows]
