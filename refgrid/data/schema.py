"""Explicit column roles (numeric vs. categorical) for tabular inputs."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

import pandas as pd

from refgrid.exceptions import ColumnNotFoundError, InvalidParameterError


if TYPE_CHECKING:
    from pandas import Series


class ColumnKind(StrEnum):
    """Role of a column when building representative values."""

    NUMERIC = "numeric"
    CATEGORICAL = "categorical"

    @classmethod
    def coerce(cls, value: ColumnKind | str) -> ColumnKind:
        """Convert a string to a ``ColumnKind``.

        Raises:
            InvalidParameterError: If ``value`` names no known kind.
        """
        try:
            return cls(value)
        except ValueError:
            raise InvalidParameterError(
                f"Invalid column kind '{value}'. Use one of {[k.value for k in cls]}.",
            ) from None

    @classmethod
    def of_series(cls, series: Series) -> ColumnKind:
        """Infer the kind of a column from its pandas dtype.

        Booleans are treated as categorical even though pandas reports them as numeric.
        """
        if pd.api.types.is_bool_dtype(series) or not pd.api.types.is_numeric_dtype(series):
            return cls.CATEGORICAL
        return cls.NUMERIC


@dataclass(frozen=True)
class TableSchema:
    """Ordered mapping from column name to :class:`ColumnKind`.

    Attributes:
        kinds: Column kinds in table column order.
    """

    kinds: Mapping[str, ColumnKind]

    def __getitem__(self, column: str) -> ColumnKind:
        if column not in self.kinds:
            raise ColumnNotFoundError(column, list(self.kinds))
        return self.kinds[column]

    def __contains__(self, column: object) -> bool:
        return column in self.kinds

    def __iter__(self) -> Iterator[str]:
        return iter(self.kinds)

    def __len__(self) -> int:
        return len(self.kinds)

    @property
    def columns(self) -> list[str]:
        return list(self.kinds)

    @property
    def numeric_cols(self) -> list[str]:
        """Names of numeric columns in table order."""
        return [col for col, kind in self.kinds.items() if kind is ColumnKind.NUMERIC]

    @property
    def categorical_cols(self) -> list[str]:
        """Names of categorical columns in table order."""
        return [col for col, kind in self.kinds.items() if kind is ColumnKind.CATEGORICAL]

    def is_numeric(self, column: str) -> bool:
        return self[column] is ColumnKind.NUMERIC

    def subset(self, columns: list[str]) -> TableSchema:
        """Return the schema restricted to ``columns`` (in the given order)."""
        return TableSchema({col: self[col] for col in columns})

    @classmethod
    def infer(
        cls,
        df: pd.DataFrame,
        overrides: Mapping[str, ColumnKind | str] | None = None,
    ) -> TableSchema:
        """Infer column kinds from ``df`` dtypes, applying explicit ``overrides``.

        Args:
            df: Table whose columns should be classified.
            overrides: Optional mapping forcing the kind of selected columns,
                e.g. an integer-coded group column marked as categorical.

        Returns:
            Schema covering every column of ``df`` in column order.

        Raises:
            ColumnNotFoundError: If an override names a column absent from ``df``.
            InvalidParameterError: If an override holds an unknown kind.
        """
        overrides = dict(overrides or {})
        columns = df.columns.to_list()
        for col in overrides:
            if col not in columns:
                raise ColumnNotFoundError(col, columns)

        kinds = {
            col: ColumnKind.coerce(overrides[col]) if col in overrides else ColumnKind.of_series(df[col])
            for col in columns
        }
        return cls(kinds=kinds)


def infer_schema(
    df: pd.DataFrame,
    overrides: Mapping[str, ColumnKind | str] | None = None,
) -> TableSchema:
    """Shortcut for :meth:`TableSchema.infer`."""
    return TableSchema.infer(df, overrides=overrides)
