"""Task-specific views over dataset content."""

from collections.abc import Mapping
from dataclasses import dataclass, field

import pandas as pd

from .schema import TableSchema


@dataclass(frozen=True)
class DatasetView:
    """Immutable snapshot of dataset data and related metadata.

    Attributes:
        df: Dataframe slice containing the relevant columns.
        schema: Column kinds for every column of ``df``.
        pretty_by_col: Mapping from column names to display-friendly labels.
    """

    df: pd.DataFrame
    """Dataframe slice containing the relevant columns."""
    schema: TableSchema
    pretty_by_col: Mapping[str, str] = field(default_factory=dict)
    """Mapping from column names to display-friendly labels."""

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        schema: TableSchema | None = None,
        pretty_by_col: Mapping[str, str] | None = None,
    ) -> "DatasetView":
        """Wrap a bare DataFrame, inferring the schema when none is given."""
        schema = schema if schema is not None else TableSchema.infer(df)
        return cls(
            df=df,
            schema=schema,
            pretty_by_col=dict(pretty_by_col or {col: col for col in df.columns}),
        )

    @property
    def numeric_cols(self) -> list[str]:
        return self.schema.numeric_cols

    @property
    def categorical_cols(self) -> list[str]:
        return self.schema.categorical_cols

