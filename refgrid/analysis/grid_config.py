"""Shared reference grid configuration (resolution and collapsing policies)."""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral

from refgrid.exceptions import InvalidParameterError

from .policies import FactorsPolicy, NumericRange, NumericsPolicy


@dataclass(frozen=True)
class GridConfig:
    """Reusable settings controlling how representative values are chosen.

    String values for the policies are coerced to their enumerations on
    construction, so ``GridConfig(numerics_policy="median")`` is valid.

    Attributes:
        length_out: Number of evenly spaced values a numeric target expands to.
        numerics_policy: How non-target numeric columns are collapsed.
        factors_policy: How non-target categorical columns are collapsed.
        numeric_range: Interval a numeric target is spread over.
    """

    length_out: int = 10
    numerics_policy: NumericsPolicy | str = NumericsPolicy.MEAN
    factors_policy: FactorsPolicy | str = FactorsPolicy.REFERENCE_LEVEL
    numeric_range: NumericRange | str = NumericRange.RANGE

    def __post_init__(self) -> None:
        # bool is an Integral, but length_out=True is almost certainly a mistake
        if isinstance(self.length_out, bool) or not isinstance(self.length_out, Integral):
            raise InvalidParameterError(f"length_out must be a positive integer, got {self.length_out!r}.")
        if self.length_out < 1:
            raise InvalidParameterError(f"length_out must be a positive integer, got {self.length_out}.")
        object.__setattr__(self, "length_out", int(self.length_out))
        object.__setattr__(self, "numerics_policy", NumericsPolicy.coerce(self.numerics_policy))
        object.__setattr__(self, "factors_policy", FactorsPolicy.coerce(self.factors_policy))
        object.__setattr__(self, "numeric_range", NumericRange.coerce(self.numeric_range))


# Default configuration used across grid builders
DEFAULT_GRID_CFG = GridConfig()


__all__ = ["DEFAULT_GRID_CFG", "GridConfig"]
