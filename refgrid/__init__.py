"""Reference grid toolbox: synthetic tables for inspecting fitted models."""

from .analysis import (
    FactorsPolicy,
    GridConfig,
    NumericRange,
    NumericsPolicy,
    ReferenceGridBuilder,
    ReferenceGridResult,
    build_grid,
)
from .data import ColumnKind, DatasetView, TableSchema, TabularDataset
from .exceptions import ColumnNotFoundError, EmptyInputError, InvalidParameterError, RefGridError


__all__ = [
    "ColumnKind",
    "ColumnNotFoundError",
    "DatasetView",
    "EmptyInputError",
    "FactorsPolicy",
    "GridConfig",
    "InvalidParameterError",
    "NumericRange",
    "NumericsPolicy",
    "RefGridError",
    "ReferenceGridBuilder",
    "ReferenceGridResult",
    "TableSchema",
    "TabularDataset",
    "build_grid",
]
