"""Conformer Base Class.

This module defines the interface every silver conformer implements. A
conformer is a pure transformation from one bronze record stream to one
silver record stream: no database access, no shared state, and the same
input always produces the same output.

Rows on both sides are plain dictionaries keyed by column name, which is
what the loader reads from and writes to the database.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Iterable, Mapping

from .quality import QualityIssue, check_untrimmed

Row = dict[str, Any]


class ConformanceError(Exception):
    """Raised when a bronze value cannot be classified by any conformance rule."""
    pass


@dataclass(frozen=True)
class TableMapping:
    """Bronze source table and silver target table for one conformer."""

    source: str
    target: str


@dataclass
class Conformer(ABC):
    """Abstract base class for per-entity conformers.

    Subclasses set `name`, `columns` and `text_columns` and implement
    `conform()`. The default quality checks only look for untrimmed text;
    subclasses extend them with entity-specific rules.

    Usage:
        class ThingConformer(Conformer):
            name = 'things'
            columns = ('thing_id', 'thing_nm')
            text_columns = ('thing_nm',)

            def conform(self, rows):
                return [{'thing_id': r['thing_id'], 'thing_nm': trim(r['thing_nm'])}
                        for r in rows]
    """

    tables: TableMapping

    name: ClassVar[str] = ''
    columns: ClassVar[tuple[str, ...]] = ()
    text_columns: ClassVar[tuple[str, ...]] = ()

    @abstractmethod
    def conform(self, rows: Iterable[Mapping[str, Any]]) -> list[Row]:
        """Transform the full bronze snapshot into silver rows.

        Args:
            rows: Every bronze row of the source table

        Returns:
            Silver rows with exactly the keys in `columns`

        Raises:
            ConformanceError: If a value falls into a known unclassified gap
        """

    def quality_checks(self, rows: list[Row]) -> list[QualityIssue]:
        """Run detection-only checks against conformed rows.

        Args:
            rows: Output of conform()

        Returns:
            Issues found (empty list when the table is clean)
        """
        return check_untrimmed(self.tables.target, rows, self.text_columns)

    def project(self, row: Mapping[str, Any]) -> Row:
        """Copy the silver columns of a row, in column order."""
        return {column: row.get(column) for column in self.columns}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(target='{self.tables.target}')"
