"""Data module for dataset classes, views and column schemas."""

from .base_dataset import BaseDataset
from .schema import ColumnKind, TableSchema, infer_schema
from .tabular_dataset import TabularDataset
from .views import DatasetView


__all__ = ["BaseDataset", "ColumnKind", "DatasetView", "TableSchema", "TabularDataset", "infer_schema"]
