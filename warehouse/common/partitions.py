"""
Per-Key Partitioning Helpers

Replacements for SQL window functions (ROW_NUMBER / LEAD ... OVER
(PARTITION BY ... ORDER BY ...)). Rows are grouped by key into ordered
lists held in memory, then a single index-based pass looks at neighbours.

All sorts are stable, so rows that tie on the ordering field keep their
input order. That makes every helper deterministic for a given input.
"""

from typing import Any, Callable, Hashable, Iterable, Optional, TypeVar

T = TypeVar('T')


def partition_by(rows: Iterable[T], key: Callable[[T], Hashable]) -> dict[Hashable, list[T]]:
    """
    Group rows by key, preserving input order inside each group.

    Groups are returned in order of each key's first appearance.

    Args:
        rows: Input rows
        key: Function extracting the partition key from a row

    Returns:
        Dictionary mapping key -> rows sharing that key
    """
    partitions: dict[Hashable, list[T]] = {}
    for row in rows:
        partitions.setdefault(key(row), []).append(row)
    return partitions


def nulls_first(value: Any) -> tuple[bool, Any]:
    """Sort key placing None before every other value (SQL Server ASC order)."""
    return (value is not None, value)


def latest(rows: list[T], order_by: Callable[[T], Any]) -> T:
    """
    Return the first row ranked by descending order_by value.

    Equivalent to ROW_NUMBER() OVER (ORDER BY x DESC) = 1. Null values rank
    after every non-null value; ties keep the earliest row.

    Args:
        rows: Non-empty list of rows in one partition
        order_by: Function extracting the ordering value

    Returns:
        The winning row
    """
    winner = rows[0]
    for candidate in rows[1:]:
        current = order_by(winner)
        value = order_by(candidate)
        if value is None:
            continue
        if current is None or value > current:
            winner = candidate
    return winner


def with_next(rows: list[T], order_by: Callable[[T], Any]) -> list[tuple[T, Optional[T]]]:
    """
    Pair every row with its successor inside the partition.

    Equivalent to LEAD(row) OVER (ORDER BY x ASC). Rows are ordered by
    order_by ascending with None first; the last row is paired with None.

    Args:
        rows: Rows of one partition, in any order
        order_by: Function extracting the ordering value

    Returns:
        List of (row, next_row) tuples in ascending order
    """
    ordered = sorted(rows, key=lambda row: nulls_first(order_by(row)))
    return [
        (row, ordered[index + 1] if index + 1 < len(ordered) else None)
        for index, row in enumerate(ordered)
    ]
