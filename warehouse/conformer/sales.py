"""
CRM Sales Conformer

Sales lines are kept one-for-one (no deduplication). Two things get fixed:

1. Dates: the source stores order/ship/due dates as YYYYMMDD integers, with
   0 or truncated values standing in for "unknown".
2. Amounts: sales, quantity and price should satisfy
   sales = quantity * price with all three positive. Quantity is trusted;
   sales and price are repaired from each other.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

from ..common.coercion import as_int
from ..common.lookups import trim
from .base import ConformanceError, Conformer, Row
from .quality import QualityIssue, check_date_order, check_sales_rule

logger = logging.getLogger(__name__)

DATE_COLUMNS = ('sls_order_dt', 'sls_ship_dt', 'sls_due_dt')
DATE_DIGITS = 8


def is_date_shaped(value: Optional[int]) -> bool:
    """
    Check whether an integer looks like a YYYYMMDD date.

    Only the shape is checked: non-zero, exactly 8 decimal digits. Calendar
    validity is not, so 20240230 passes.

    Examples:
        >>> is_date_shaped(20101229)
        True
        >>> is_date_shaped(0)
        False
        >>> is_date_shaped(5489)
        False
    """
    if value is None or value == 0:
        return False
    text = str(value)
    return len(text) == DATE_DIGITS and text.isdigit()


def parse_int_date(value: Any) -> Optional[date]:
    """
    Convert a YYYYMMDD integer into a date.

    Args:
        value: Raw integer (or numeric string) date

    Returns:
        date, or None if the value is missing or not date-shaped

    Raises:
        ConformanceError: If the value is date-shaped but not a calendar date
                          (e.g. 20241301 or 20240230)
    """
    number = as_int(value)
    if not is_date_shaped(number):
        return None

    try:
        return datetime.strptime(str(number), '%Y%m%d').date()
    except ValueError as e:
        raise ConformanceError(f"Invalid calendar date {number}: {e}") from e


def reconcile_amounts(
    sales: Optional[int],
    quantity: Optional[int],
    price: Optional[int],
) -> tuple[Optional[int], Optional[int], Optional[int]]:
    """
    Repair sales and price so that sales = quantity * price.

    Evaluated in order:
    1. If sales is null, not positive, or differs from |price| * quantity,
       sales becomes |price| * quantity. A null or zero price cannot produce
       a valid amount, so in that case sales is left as-is for step 2.
    2. If price is null or not positive, price becomes |sales| / quantity
       using the sales value from step 1. The division truncates toward
       zero, so sales is then rebuilt as price * quantity to keep the row
       consistent. A zero or null quantity, or a quotient of zero, leaves
       price null and sales unchanged.

    Quantity is never changed. The result is a fixed point: reconciling it
    again returns it unchanged.

    Args:
        sales: Extended sales amount
        quantity: Units sold
        price: Unit price

    Returns:
        (sales, quantity, price) after reconciliation

    Examples:
        >>> reconcile_amounts(0, 5, 10)
        (50, 5, 10)
        >>> reconcile_amounts(50, 5, 0)
        (50, 5, 10)
        >>> reconcile_amounts(-50, 5, 0)
        (50, 5, 10)
        >>> reconcile_amounts(10, 3, 0)
        (9, 3, 3)
    """
    if price and quantity is not None:
        expected = abs(price) * quantity
        if sales is None or sales <= 0 or sales != expected:
            sales = expected

    if price is None or price <= 0:
        price = None
        if sales is not None and quantity:
            derived = int(abs(sales) / quantity)
            if derived:
                price = derived
                sales = derived * quantity

    return sales, quantity, price


@dataclass
class SalesConformer(Conformer):
    """Parse integer dates and reconcile amounts for CRM sales lines (crm_sales_details)."""

    name = 'sales'
    columns = (
        'sls_ord_num',
        'sls_prd_key',
        'sls_cust_id',
        'sls_order_dt',
        'sls_ship_dt',
        'sls_due_dt',
        'sls_sales',
        'sls_quantity',
        'sls_price',
    )
    text_columns = ('sls_ord_num', 'sls_prd_key')

    def conform(self, rows: Iterable[Mapping[str, Any]]) -> list[Row]:
        """
        Conform every sales line independently.

        Args:
            rows: Bronze crm_sales_details rows

        Returns:
            One silver row per input row

        Raises:
            ConformanceError: If a date-shaped value is not a calendar date
        """
        conformed = [self._conform_row(row) for row in rows]

        logger.debug("Conformed sales lines", extra={'rows': len(conformed)})
        return conformed

    def _conform_row(self, row: Mapping[str, Any]) -> Row:
        sales, quantity, price = reconcile_amounts(
            as_int(row.get('sls_sales')),
            as_int(row.get('sls_quantity')),
            as_int(row.get('sls_price')),
        )

        conformed = {
            'sls_ord_num': trim(row.get('sls_ord_num')),
            'sls_prd_key': trim(row.get('sls_prd_key')),
            'sls_cust_id': row.get('sls_cust_id'),
        }
        for column in DATE_COLUMNS:
            try:
                conformed[column] = parse_int_date(row.get(column))
            except ConformanceError as e:
                logger.error(
                    "Unparseable sales date",
                    extra={
                        'order_number': row.get('sls_ord_num'),
                        'column': column,
                        'value': row.get(column),
                    }
                )
                raise ConformanceError(f"{row.get('sls_ord_num')}.{column}: {e}") from e

        conformed['sls_sales'] = sales
        conformed['sls_quantity'] = quantity
        conformed['sls_price'] = price
        return conformed

    def quality_checks(self, rows: list[Row]) -> list[QualityIssue]:
        table = self.tables.target
        return (
            super().quality_checks(rows)
            + check_sales_rule(table, rows)
            + check_date_order(table, rows, 'sls_order_dt', 'sls_ship_dt')
            + check_date_order(table, rows, 'sls_order_dt', 'sls_due_dt')
        )
