"""Generic dataset class for arbitrary tables loaded from CSV files or DataFrames."""

from collections.abc import Iterable, Mapping
from pathlib import Path

import pandas as pd

from refgrid.exceptions import ColumnNotFoundError, InvalidParameterError

from .base_dataset import BaseDataset
from .schema import ColumnKind


class TabularDataset(BaseDataset):
    """Loading and light preprocessing for any tabular dataset.

    **Example workflow**:
    >>> from refgrid.data import TabularDataset
    >>> ds = TabularDataset.from_csv("affairs.csv", categorical=["salary"], normalize_names=True)
    >>> result = ds.make_reference_grid(["salary", "concealing"], length_out=10).fit().result()
    >>> result.grid.shape  # 3 salary levels x 10 concealing values
    >>> preds = result.grid.assign(liking=model.predict(result.grid))
    """

    @classmethod
    def from_csv(
        cls,
        csv_path: str | Path,
        *,
        categorical: Iterable[str] = (),
        numeric: Iterable[str] = (),
        normalize_names: bool = False,
        pretty_names: Mapping[str, str] | None = None,
        **read_csv_kwargs: object,
    ) -> "TabularDataset":
        """Load a dataset from a CSV file.

        - Optionally normalize column names to snake_case
        - Convert ``categorical`` columns to the pandas ``category`` dtype

        Args:
            csv_path: Path to the CSV file
            categorical: Columns to treat as categorical (converted to ``category`` dtype)
            numeric: Columns to treat as numeric regardless of their parsed dtype
            normalize_names: Normalize column names (applied before ``categorical``/``numeric`` lookup)
            pretty_names: Display labels keyed by (normalized) column name
            **read_csv_kwargs: Passed through to :func:`pandas.read_csv`

        Returns:
            TabularDataset instance with loaded data
        """
        df = pd.read_csv(Path(csv_path), **read_csv_kwargs)
        if normalize_names:
            df = df.pipe(cls._normalize_col_names)
        return cls.from_frame(df, categorical=categorical, numeric=numeric, pretty_names=pretty_names)

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        *,
        categorical: Iterable[str] = (),
        numeric: Iterable[str] = (),
        pretty_names: Mapping[str, str] | None = None,
    ) -> "TabularDataset":
        """Wrap an in-memory DataFrame, declaring column roles explicitly.

        Raises:
            ColumnNotFoundError: If a declared column is absent from ``df``.
        """
        categorical, numeric = list(categorical), list(numeric)
        for col in [*categorical, *numeric]:
            if col not in df.columns:
                raise ColumnNotFoundError(col, df.columns.to_list())
        overlap = sorted(set(categorical) & set(numeric))
        if overlap:
            raise InvalidParameterError(f"Columns {overlap} are declared both categorical and numeric.")

        df = df.astype({col: "category" for col in categorical}) if categorical else df.copy()
        overrides = {
            **{col: ColumnKind.CATEGORICAL for col in categorical},
            **{col: ColumnKind.NUMERIC for col in numeric},
        }
        return cls(df=df, schema_overrides=overrides, pretty_names=pretty_names)

    @staticmethod
    def _normalize_col_names(df: pd.DataFrame) -> pd.DataFrame:
        """Standardize column names to regular snake_case.

        Strip whitespace, convert to lowercase, replace spaces/slashes/hyphens/dots with underscores, collapse multiple underscores
        """
        return df.set_axis(
            df.columns.str.strip()
            .str.lower()
            .str.replace(r"[\s/\-.]+", "_", regex=True)
            .str.replace(r"_+", "_", regex=True),
            axis=1,
        )
