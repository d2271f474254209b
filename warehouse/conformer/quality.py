"""
Data Quality Checks

Detection-only checks run against conformed (silver) rows. They mirror the
diagnostic queries a data engineer runs after each load ("expectation: no
rows returned") and never modify data: every check returns the violations it
found as QualityIssue records, and the caller decides what to do with them
(the CLI logs them as warnings).

Each check returns an empty list when the table is clean.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Collection, Iterable, Mapping, Optional

# Number of offending values kept on an issue for logging
SAMPLE_SIZE = 5

Rows = Iterable[Mapping[str, Any]]


@dataclass
class QualityIssue:
    """A single failed expectation on a silver table."""

    table: str
    check: str
    count: int
    sample: list[Any] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.table}: {self.check} ({self.count} rows, e.g. {self.sample})"


def _issue(table: str, check: str, offenders: list[Any]) -> list[QualityIssue]:
    if not offenders:
        return []
    return [QualityIssue(table=table, check=check, count=len(offenders), sample=offenders[:SAMPLE_SIZE])]


def check_primary_key(table: str, rows: Rows, key: str) -> list[QualityIssue]:
    """Null or duplicate values in a primary key column."""
    rows = list(rows)
    counts = Counter(row.get(key) for row in rows)
    duplicates = [value for value, count in counts.items() if value is not None and count > 1]
    nulls = [None] * counts.get(None, 0)

    return (
        _issue(table, f"duplicate {key}", duplicates)
        + _issue(table, f"null {key}", nulls)
    )


def check_untrimmed(table: str, rows: Rows, columns: Collection[str]) -> list[QualityIssue]:
    """Text values with leading or trailing whitespace."""
    rows = list(rows)
    issues = []
    for column in columns:
        offenders = [
            row.get(column) for row in rows
            if isinstance(row.get(column), str) and row.get(column) != row.get(column).strip()
        ]
        issues.extend(_issue(table, f"untrimmed {column}", offenders))
    return issues


def check_allowed_values(table: str, rows: Rows, column: str, allowed: Collection[str]) -> list[QualityIssue]:
    """Categorical values outside their closed enumeration."""
    offenders = [row.get(column) for row in rows if row.get(column) not in allowed]
    return _issue(table, f"{column} outside allowed values", offenders)


def check_negative(table: str, rows: Rows, column: str) -> list[QualityIssue]:
    """Negative numeric values."""
    offenders = [row.get(column) for row in rows if row.get(column) is not None and row.get(column) < 0]
    return _issue(table, f"negative {column}", offenders)


def check_date_order(table: str, rows: Rows, earlier: str, later: str) -> list[QualityIssue]:
    """Rows whose `later` date falls before their `earlier` date."""
    offenders = [
        (row.get(earlier), row.get(later)) for row in rows
        if row.get(earlier) is not None and row.get(later) is not None
        and row.get(later) < row.get(earlier)
    ]
    return _issue(table, f"{later} before {earlier}", offenders)


def check_date_range(
    table: str,
    rows: Rows,
    column: str,
    lower: Optional[date],
    upper: Optional[date],
) -> list[QualityIssue]:
    """Dates outside [lower, upper]; a None bound is open."""
    offenders = [
        row.get(column) for row in rows
        if row.get(column) is not None
        and ((lower is not None and row.get(column) < lower)
             or (upper is not None and row.get(column) > upper))
    ]
    return _issue(table, f"{column} out of range", offenders)


def check_sales_rule(table: str, rows: Rows) -> list[QualityIssue]:
    """
    Sales lines breaking sales = quantity * price with all three positive.

    Null, zero and negative values all count as violations.
    """
    offenders = []
    for row in rows:
        sales = row.get('sls_sales')
        quantity = row.get('sls_quantity')
        price = row.get('sls_price')
        if (
            sales is None or quantity is None or price is None
            or sales <= 0 or quantity <= 0 or price <= 0
            or sales != quantity * price
        ):
            offenders.append((sales, quantity, price))
    return _issue(table, "sales != quantity * price", offenders)


def check_references(
    table: str,
    rows: Rows,
    column: str,
    known_keys: Collection[Any],
    referenced: str,
) -> list[QualityIssue]:
    """
    Foreign key values with no match in the referenced key set.

    Args:
        table: Table being checked
        rows: Rows of that table
        column: Referencing column
        known_keys: Keys present in the referenced table
        referenced: Name of the referenced table/column, for the message
    """
    known = set(known_keys)
    offenders = [row.get(column) for row in rows if row.get(column) not in known]
    return _issue(table, f"{column} not found in {referenced}", offenders)
