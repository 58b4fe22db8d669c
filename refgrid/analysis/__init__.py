"""Analysis modules computing reference grids from dataset views."""

from .grid_config import DEFAULT_GRID_CFG, GridConfig
from .policies import FactorsPolicy, NumericRange, NumericsPolicy, ValueShortcut
from .reference_grid import ReferenceGridBuilder, ReferenceGridResult, build_grid, cartesian_product
from .target_spec import TargetSpec, parse_target


__all__ = [
    "DEFAULT_GRID_CFG",
    "FactorsPolicy",
    "GridConfig",
    "NumericRange",
    "NumericsPolicy",
    "ReferenceGridBuilder",
    "ReferenceGridResult",
    "TargetSpec",
    "ValueShortcut",
    "build_grid",
    "cartesian_product",
    "parse_target",
]
