"""Closed policy enumerations and the pure functions that compute representative values.

Every column of a reference grid is reduced to a *representative-value set*:

- numeric targets are spread over an interval (:class:`NumericRange`) with
  ``length_out`` evenly spaced points,
- categorical targets enumerate their observed levels,
- non-target columns are collapsed by :class:`NumericsPolicy` or
  :class:`FactorsPolicy`, either to one scalar or to a full enumeration.

All helpers ignore missing values and return a new :class:`pandas.Series`
(never a view of the input) so the grid holds no reference to the source data.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import TypeVar

import numpy as np
import pandas as pd

from refgrid.exceptions import EmptyInputError, InvalidParameterError


_E = TypeVar("_E", bound="_CoercibleEnum")


class _CoercibleEnum(StrEnum):
    @classmethod
    def coerce(cls: type[_E], value: _E | str) -> _E:
        """Convert ``value`` to a member, raising ``InvalidParameterError`` for unknown names."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidParameterError(
                f"Invalid {cls.__name__} '{value}'. Use one of {[m.value for m in cls]}.",
            ) from None


class NumericsPolicy(_CoercibleEnum):
    """How a non-target numeric column is collapsed."""

    MEAN = "mean"
    MEDIAN = "median"
    MIN = "min"
    MAX = "max"
    COMBINATION = "combination"

    @property
    def statistic(self) -> Callable[[pd.Series], float] | None:
        """Scalar statistic of the policy (``None`` for ``COMBINATION``)."""
        return _NUMERIC_STATISTICS.get(self)


class FactorsPolicy(_CoercibleEnum):
    """How a non-target categorical column is collapsed."""

    REFERENCE_LEVEL = "reference_level"
    COMBINATION = "combination"


class NumericRange(_CoercibleEnum):
    """Interval a numeric target is spread over."""

    RANGE = "range"
    """Observed minimum to observed maximum."""
    IQR = "iqr"
    """First to third quartile."""
    SD = "sd"
    """Mean minus one standard deviation to mean plus one standard deviation."""

    def bounds(self, series: pd.Series) -> tuple[float, float]:
        """Return the ``(low, high)`` interval of ``series`` for this range."""
        return _RANGE_BOUNDS[self](observed(series))


class ValueShortcut(_CoercibleEnum):
    """Named sets of representative values usable in target specifications (``"x=[sd]"``)."""

    SD = "sd"
    FIVENUM = "fivenum"
    MINMAX = "minmax"

    def values(self, series: pd.Series) -> pd.Series:
        """Compute the shortcut values for ``series``."""
        return _dedupe(_SHORTCUT_VALUES[self](observed(series)))


def observed(series: pd.Series) -> pd.Series:
    """Return the non-missing values of ``series``.

    Raises:
        EmptyInputError: If the column holds no observed values.
    """
    values = series.dropna()
    if values.empty:
        raise EmptyInputError(f"Column '{series.name}' has no non-missing values.")
    return values


def _std(values: pd.Series) -> float:
    # sample sd is undefined for a single observation
    sd = values.std()
    return 0.0 if pd.isna(sd) else float(sd)


def _dedupe(values: list[float] | np.ndarray) -> pd.Series:
    return pd.Series(pd.unique(np.asarray(values, dtype=float)))


_NUMERIC_STATISTICS: dict[NumericsPolicy, Callable[[pd.Series], float]] = {
    NumericsPolicy.MEAN: lambda s: s.mean(),
    NumericsPolicy.MEDIAN: lambda s: s.median(),
    NumericsPolicy.MIN: lambda s: s.min(),
    NumericsPolicy.MAX: lambda s: s.max(),
}

_RANGE_BOUNDS: dict[NumericRange, Callable[[pd.Series], tuple[float, float]]] = {
    NumericRange.RANGE: lambda s: (s.min(), s.max()),
    NumericRange.IQR: lambda s: (s.quantile(0.25), s.quantile(0.75)),
    NumericRange.SD: lambda s: (s.mean() - _std(s), s.mean() + _std(s)),
}

_SHORTCUT_VALUES: dict[ValueShortcut, Callable[[pd.Series], list[float]]] = {
    ValueShortcut.SD: lambda s: [s.mean() - _std(s), s.mean(), s.mean() + _std(s)],
    ValueShortcut.FIVENUM: lambda s: [s.min(), *s.quantile([0.25, 0.5, 0.75]).tolist(), s.max()],
    ValueShortcut.MINMAX: lambda s: [s.min(), s.max()],
}


def spread_numeric(series: pd.Series, length_out: int, numeric_range: NumericRange = NumericRange.RANGE) -> pd.Series:
    """Evenly spaced values over the ``numeric_range`` interval of ``series``.

    The interval ends are included. Coinciding points (constant columns) are
    merged, so a constant column yields a single value. ``length_out=1`` yields
    the lower bound only.
    """
    low, high = numeric_range.bounds(series)
    return _dedupe(np.linspace(low, high, length_out))


def summarize_numeric(series: pd.Series, policy: NumericsPolicy) -> pd.Series:
    """Collapse ``series`` to the single statistic named by ``policy``."""
    statistic = policy.statistic
    if statistic is None:
        raise InvalidParameterError(f"Policy '{policy}' enumerates values and has no single statistic.")
    return pd.Series([statistic(observed(series))])


def levels(series: pd.Series) -> pd.Series:
    """Distinct observed labels of a categorical column.

    Ordering: declared category order for pandas categoricals, natural sort
    order otherwise, first-observed order when labels cannot be compared.
    The pandas categorical dtype is preserved.
    """
    values = observed(series)
    if isinstance(series.dtype, pd.CategoricalDtype):
        present = set(values.unique())
        labels = [cat for cat in series.dtype.categories if cat in present]
        return pd.Series(labels, dtype=series.dtype)

    labels = list(pd.unique(values))
    try:
        labels = sorted(labels)
    except TypeError:
        pass  # mixed label types keep first-observed order
    return pd.Series(labels, dtype=series.dtype)


def reference_level(series: pd.Series) -> pd.Series:
    """The reference level of a categorical column: its first level in :func:`levels` order."""
    return levels(series).iloc[:1].reset_index(drop=True)


def numeric_values(
    series: pd.Series,
    *,
    is_target: bool,
    length_out: int,
    policy: NumericsPolicy,
    numeric_range: NumericRange,
) -> pd.Series:
    """Representative values of a numeric column under the given role and policy."""
    if is_target or policy is NumericsPolicy.COMBINATION:
        return spread_numeric(series, length_out, numeric_range)
    return summarize_numeric(series, policy)


def categorical_values(series: pd.Series, *, is_target: bool, policy: FactorsPolicy) -> pd.Series:
    """Representative values of a categorical column under the given role and policy."""
    if is_target or policy is FactorsPolicy.COMBINATION:
        return levels(series)
    return reference_level(series)


__all__ = [
    "FactorsPolicy",
    "NumericRange",
    "NumericsPolicy",
    "ValueShortcut",
    "categorical_values",
    "levels",
    "numeric_values",
    "observed",
    "reference_level",
    "spread_numeric",
    "summarize_numeric",
]
