"""Base dataset class for all dataset implementations."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Self

import numpy as np
import pandas as pd
from sklearn.impute import SimpleImputer

from refgrid.exceptions import ColumnNotFoundError, InvalidParameterError

from .schema import ColumnKind, TableSchema
from .views import DatasetView


if TYPE_CHECKING:
    from refgrid.analysis.policies import FactorsPolicy, NumericRange, NumericsPolicy
    from refgrid.analysis.reference_grid import ReferenceGridBuilder
    from refgrid.analysis.target_spec import TargetSpec

logger = logging.getLogger(__name__)

MissingStrategy = Literal["drop", "global_impute", "keep"]


class BaseDataset(ABC):
    """Abstract base class for dataset handlers used throughout the toolbox."""

    def __init__(
        self,
        df: pd.DataFrame | None = None,
        schema_overrides: Mapping[str, ColumnKind | str] | None = None,
        pretty_names: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the base dataset.

        Args:
            df: Pre-loaded and cleaned DataFrame (optional)
            schema_overrides: Column kinds forcing numeric/categorical roles
                where dtype inference would be wrong (e.g. integer-coded groups)
            pretty_names: Display labels for columns
        """
        self._df: pd.DataFrame | None = df
        self._schema_overrides = dict(schema_overrides or {})
        self._pretty_names = dict(pretty_names or {})
        self._schema: TableSchema | None = None

    @classmethod
    @abstractmethod
    def from_csv(cls, csv_path: str | Path, **kwargs: object) -> "BaseDataset":
        """Load dataset from CSV file.

        Args:
            csv_path: Path to the CSV file
            **kwargs: Additional loading parameters

        Returns:
            Dataset instance with loaded data
        """
        ...

    @property
    def df(self) -> pd.DataFrame:
        """Get the raw/cleaned DataFrame.

        Raises:
            ValueError: If dataset not loaded
        """
        if self._df is None:
            raise ValueError("Dataset not loaded. Use from_csv() to load data.")
        return self._df

    @property
    def schema(self) -> TableSchema:
        """Column kinds of the dataset, inferred once and cached."""
        if self._schema is None:
            self._schema = TableSchema.infer(self.df, overrides=self._schema_overrides)
        return self._schema

    @property
    def numeric_cols(self) -> list[str]:
        return self.schema.numeric_cols

    @property
    def categorical_cols(self) -> list[str]:
        return self.schema.categorical_cols

    @property
    def df_pretty(self) -> pd.DataFrame:
        """Get the DataFrame with pretty column names."""
        return self.df.rename(columns={col: self.get_pretty_name(col) for col in self.df.columns})

    def with_df(self, df: pd.DataFrame) -> Self:
        """Return a new dataset of the same class wrapping ``df``.

        Schema overrides and pretty names are carried over for columns still present.
        """
        return type(self)(
            df=df,
            schema_overrides={col: kind for col, kind in self._schema_overrides.items() if col in df.columns},
            pretty_names=self._pretty_names,
        )

    def get_pretty_name(self, column_name: str) -> str:
        """Convert column name to pretty name for visualization.

        Args:
            column_name: The cleaned column name

        Returns:
            Pretty name suitable for plot labels and titles
        """
        if column_name in self._pretty_names:
            return self._pretty_names[column_name]
        # Fallback: capitalize and replace underscores
        return str(column_name).replace("_", " ").title()

    def view(
        self,
        columns: Iterable[str] | None = None,
        missing_strategy: MissingStrategy = "drop",
    ) -> DatasetView:
        """Build an immutable dataset view for analyzers.

        Args:
            columns: Columns to include in the view (defaults to all)
            missing_strategy: Strategy to handle missing values
                - "drop": drop rows with any missing value in the selected columns
                - "global_impute": median-impute numeric and mode-impute categorical columns
                - "keep": leave missing values; statistics skip them

        Returns:
            DatasetView containing selected data and metadata
        """
        if missing_strategy not in ("drop", "global_impute", "keep"):
            raise InvalidParameterError(
                f"Invalid missing_strategy='{missing_strategy}'. Use 'drop', 'global_impute' or 'keep'.",
            )

        selected_cols = list(columns) if columns is not None else self.df.columns.to_list()
        for col in selected_cols:
            if col not in self.df.columns:
                raise ColumnNotFoundError(col, self.df.columns.to_list())
        frame = self.df.loc[:, selected_cols].copy()
        schema = self.schema.subset(selected_cols)

        if missing_strategy == "drop":
            n_rows = len(frame)
            frame = frame.dropna(axis=0, how="any")
            if len(frame) < n_rows:
                logger.debug("Dropped %d of %d rows with missing values", n_rows - len(frame), n_rows)
        elif missing_strategy == "global_impute":
            frame = self._impute(frame, schema)

        return DatasetView(
            df=frame,
            schema=schema,
            pretty_by_col={col: self.get_pretty_name(col) for col in selected_cols},
        )

    @staticmethod
    def _impute(frame: pd.DataFrame, schema: TableSchema) -> pd.DataFrame:
        # Columns that are entirely missing are left untouched; SimpleImputer would drop them
        for cols, strategy in ((schema.numeric_cols, "median"), (schema.categorical_cols, "most_frequent")):
            cols = [col for col in cols if frame[col].isna().any() and frame[col].notna().any()]
            if not cols:
                continue
            block = frame[cols].astype(float if strategy == "median" else object)
            # SimpleImputer only recognises np.nan, not None / pd.NA
            block = block.where(block.notna(), np.nan)
            imputed = SimpleImputer(strategy=strategy).fit_transform(block)
            for i, col in enumerate(cols):
                filled = pd.Series(imputed[:, i], index=frame.index, name=col)
                # medians may be fractional, so numeric columns stay float
                frame[col] = filled.astype(float) if strategy == "median" else filled.astype(frame[col].dtype)
        return frame

    def make_reference_grid(
        self,
        targets: "str | TargetSpec | Sequence[str | TargetSpec]",
        *,
        columns: Iterable[str] | None = None,
        length_out: int = 10,
        numerics_policy: "NumericsPolicy | str" = "mean",
        factors_policy: "FactorsPolicy | str" = "reference_level",
        numeric_range: "NumericRange | str" = "range",
        missing_strategy: MissingStrategy = "keep",
    ) -> "ReferenceGridBuilder":
        """Instantiate a reference grid builder configured for this dataset.

        Example:
            >>> ds = TabularDataset.from_csv("affairs.csv", categorical=["salary"])
            >>> result = ds.make_reference_grid(["salary", "concealing"]).fit().result()
            >>> result.grid.shape

        Args:
            targets: Column names or target specifications to enumerate
            columns: Optional column subset of the grid (defaults to all columns)
            length_out: Number of values a numeric target expands to
            numerics_policy: How non-target numeric columns are collapsed
            factors_policy: How non-target categorical columns are collapsed
            numeric_range: Interval a numeric target is spread over
            missing_strategy: Strategy to handle missing values before computing statistics

        Returns:
            ReferenceGridBuilder instance
        """
        from refgrid.analysis.grid_config import GridConfig
        from refgrid.analysis.reference_grid import ReferenceGridBuilder

        config = GridConfig(
            length_out=length_out,
            numerics_policy=numerics_policy,
            factors_policy=factors_policy,
            numeric_range=numeric_range,
        )
        return ReferenceGridBuilder(
            self.view(columns=columns, missing_strategy=missing_strategy),
            targets,
            config,
        )
