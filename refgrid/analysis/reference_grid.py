"""Reference grids: small synthetic tables for inspecting fitted models.

A reference grid enumerates representative values of one or more *target*
columns, crossed together, while every other column is held at a single
representative value (or, on request, enumerated as well). Feeding the grid to
``model.predict`` shows how the predicted response changes along the targets
with everything else fixed.

Row count invariant: ``len(grid) == prod(len(values) for values in values_by_col.values())``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from refgrid.data.schema import ColumnKind, TableSchema
from refgrid.data.views import DatasetView
from refgrid.exceptions import ColumnNotFoundError, EmptyInputError, InvalidParameterError

from .base_analyser import BaseAnalyser
from .grid_config import DEFAULT_GRID_CFG, GridConfig
from .policies import FactorsPolicy, NumericRange, NumericsPolicy, categorical_values, levels, numeric_values
from .target_spec import TargetSpec, parse_targets


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceGridResult:
    """Results package for :class:`ReferenceGridBuilder`.

    Attributes:
        grid: The reference grid, one row per combination of representative values.
        targets: Target column names in the requested order.
        values_by_col: Representative-value set of every column, in grid column order.
        held_constant: Non-target columns collapsed to a single value, with that value.
        pretty_by_col: Display labels for plotting predictions against grid columns.
    """

    grid: pd.DataFrame
    targets: list[str]
    values_by_col: dict[str, pd.Series]
    held_constant: dict[str, Any]
    pretty_by_col: dict[str, str]

    @property
    def n_rows(self) -> int:
        return len(self.grid)

    @property
    def cardinalities(self) -> dict[str, int]:
        """Size of each column's representative-value set."""
        return {col: len(values) for col, values in self.values_by_col.items()}


class ReferenceGridBuilder(BaseAnalyser):
    """Build a reference grid from a dataset view.

    Inputs are validated on construction, so invalid targets fail before any
    computation. ``fit()`` computes the representative values and the
    Cartesian product.

    Example:
        >>> view = DatasetView.from_frame(df)
        >>> result = ReferenceGridBuilder(view, ["salary", "concealing"]).fit().result()
        >>> result.grid.assign(pred=model.predict(result.grid))

    Attributes:
        targets: Parsed target specifications.
        config: Resolution and collapsing policies.
    """

    def __init__(
        self,
        view: DatasetView,
        targets: str | TargetSpec | Sequence[str | TargetSpec],
        config: GridConfig = DEFAULT_GRID_CFG,
    ) -> None:
        """Initialize the builder.

        Args:
            view: Immutable dataset view holding the source table and its schema.
            targets: Column names or target specifications (``"age=[20, 40]"``).
            config: Grid configuration (default: :data:`DEFAULT_GRID_CFG`).

        Raises:
            EmptyInputError: If the table has no rows or no columns.
            ColumnNotFoundError: If a target is not a column of the table.
            InvalidParameterError: On empty or duplicate targets or malformed specifications.
        """
        df = view.df
        if df.shape[0] == 0 or df.shape[1] == 0:
            raise EmptyInputError(f"Cannot build a reference grid from an empty table (shape={df.shape}).")

        columns = df.columns.to_list()
        self.targets = parse_targets(targets, columns)
        for spec in self.targets:
            if spec.column not in columns:
                raise ColumnNotFoundError(spec.column, columns)
        missing = [col for col in columns if col not in view.schema]
        if missing:
            raise InvalidParameterError(f"Schema does not cover columns {missing}.")

        self._view = view
        self.config = config
        self._fitted = False
        self._values_by_col: dict[str, pd.Series] | None = None
        self._grid: pd.DataFrame | None = None

    @property
    def target_columns(self) -> list[str]:
        return [spec.column for spec in self.targets]

    def fit(self) -> "ReferenceGridBuilder":
        """Compute representative values per column and cross them.

        Returns:
            Self for method chaining.
        """
        df, schema = self._view.df, self._view.schema
        specs = {spec.column: spec for spec in self.targets}
        order = [*self.target_columns, *(col for col in df.columns if col not in specs)]

        values_by_col = {
            col: self._representative_values(df[col], schema[col], specs.get(col)) for col in order
        }
        for col, values in values_by_col.items():
            logger.debug("Column %r: %d representative value(s)", col, len(values))

        self._values_by_col = values_by_col
        self._grid = cartesian_product(values_by_col)
        logger.debug("Reference grid over targets %s has shape %s", self.target_columns, self._grid.shape)
        self._fitted = True
        return self

    def result(self) -> ReferenceGridResult:
        """Return the reference grid and its metadata.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        if not self._fitted or self._grid is None or self._values_by_col is None:
            raise ValueError("Must call fit() before result()")

        targets = self.target_columns
        return ReferenceGridResult(
            grid=self._grid.copy(),
            targets=targets,
            values_by_col={col: values.copy() for col, values in self._values_by_col.items()},
            held_constant={
                col: values.iloc[0]
                for col, values in self._values_by_col.items()
                if col not in targets and len(values) == 1
            },
            pretty_by_col={col: self._view.pretty_by_col.get(col, col) for col in self._values_by_col},
        )

    def _representative_values(self, series: pd.Series, kind: ColumnKind, spec: TargetSpec | None) -> pd.Series:
        cfg = self.config
        is_numeric = kind is ColumnKind.NUMERIC
        if spec is not None and spec.values is not None:
            return _explicit_values(series, spec, is_numeric=is_numeric)
        if spec is not None and spec.shortcut is not None:
            if not is_numeric:
                raise InvalidParameterError(
                    f"Shortcut '{spec.shortcut}' needs a numeric column, but '{spec.column}' is categorical.",
                )
            return spec.shortcut.values(series)
        if is_numeric:
            return numeric_values(
                series,
                is_target=spec is not None,
                length_out=cfg.length_out,
                policy=cfg.numerics_policy,
                numeric_range=cfg.numeric_range,
            )
        return categorical_values(series, is_target=spec is not None, policy=cfg.factors_policy)


def _explicit_values(series: pd.Series, spec: TargetSpec, *, is_numeric: bool) -> pd.Series:
    """Representative values given literally in a target specification."""
    if not is_numeric:
        # declared categories may be requested even if unobserved; plain labels must be observed
        if isinstance(series.dtype, pd.CategoricalDtype):
            allowed = series.dtype.categories.to_list()
        else:
            allowed = levels(series).to_list()
        unknown = [value for value in spec.values if value not in allowed]
        if unknown:
            raise InvalidParameterError(
                f"Values {unknown} of target '{spec.column}' are not levels of the column ({allowed}).",
            )
    try:
        values = pd.Series(list(spec.values), dtype=float if is_numeric else series.dtype)
    except (TypeError, ValueError):
        raise InvalidParameterError(
            f"Values {list(spec.values)} do not fit column '{spec.column}' of dtype {series.dtype}.",
        ) from None
    return values.drop_duplicates().reset_index(drop=True)


def cartesian_product(values_by_col: Mapping[str, pd.Series]) -> pd.DataFrame:
    """Cross the value sets of all columns into a DataFrame.

    Columns appear in mapping order; the first column varies slowest. Column
    dtypes (including categoricals) are taken from the value sets.
    """
    shape = tuple(len(values) for values in values_by_col.values())
    codes = np.unravel_index(np.arange(math.prod(shape)), shape)
    return pd.DataFrame(
        {col: values.iloc[idx].reset_index(drop=True) for (col, values), idx in zip(values_by_col.items(), codes)},
        columns=list(values_by_col),
    )


def build_grid(
    table: pd.DataFrame,
    targets: str | TargetSpec | Sequence[str | TargetSpec],
    length_out: int = 10,
    numerics_policy: NumericsPolicy | str = NumericsPolicy.MEAN,
    factors_policy: FactorsPolicy | str = FactorsPolicy.REFERENCE_LEVEL,
    *,
    numeric_range: NumericRange | str = NumericRange.RANGE,
    schema: TableSchema | Mapping[str, ColumnKind | str] | None = None,
) -> pd.DataFrame:
    """Build a reference grid from a DataFrame.

    Target numeric columns are spread over ``length_out`` evenly spaced values
    between their observed minimum and maximum; target categorical columns
    enumerate their observed levels. Non-target columns are collapsed according
    to ``numerics_policy`` and ``factors_policy``. The grid's columns are the
    targets (in the given order) followed by the remaining columns. Coinciding
    spread values are merged, so a constant column (including one collapsed by
    an earlier call) contributes a single value and the grid may have fewer rows
    than ``length_out`` suggests.

    Example:
        >>> grid = build_grid(df, ["salary", "concealing"], length_out=10)
        >>> len(grid)  # 3 salary levels x 10 concealing values
        30
        >>> # coarser concealing resolution, keeping every salary level of the grid
        >>> len(build_grid(grid, "concealing", length_out=4, factors_policy="combination"))
        12

    Args:
        table: Source table; must have at least one row and one column.
        targets: Column name(s) or target specifications (``"age=[20, 40]"``, ``"age=[sd]"``).
        length_out: Number of values a numeric target expands to.
        numerics_policy: ``mean``, ``median``, ``min``, ``max`` or ``combination``.
        factors_policy: ``reference_level`` or ``combination``.
        numeric_range: ``range`` (min..max), ``iqr`` (Q1..Q3) or ``sd`` (mean ± sd).
        schema: Column kinds; a full :class:`TableSchema` or per-column overrides of
            dtype inference.

    Returns:
        New DataFrame holding the reference grid.

    Raises:
        EmptyInputError: If ``table`` is empty or a required column has no observations.
        ColumnNotFoundError: If a target (or schema override) names an absent column.
        InvalidParameterError: On invalid ``length_out``, policy names or targets.
    """
    return (
        ReferenceGridBuilder(
            _make_view(table, schema),
            targets,
            GridConfig(
                length_out=length_out,
                numerics_policy=numerics_policy,
                factors_policy=factors_policy,
                numeric_range=numeric_range,
            ),
        )
        .fit()
        .result()
        .grid
    )


def _make_view(table: pd.DataFrame, schema: TableSchema | Mapping[str, ColumnKind | str] | None) -> DatasetView:
    if not isinstance(table, pd.DataFrame):
        raise InvalidParameterError(f"table must be a pandas DataFrame, got {type(table).__name__}.")
    if not isinstance(schema, TableSchema):
        schema = TableSchema.infer(table, overrides=schema)
    return DatasetView.from_frame(table, schema=schema)
