"""src/smoothcast/io/__init__.py"""
from .readers import read_csv, read_series_csv, to_epoch_ms
from .writers import ensure_parent_dir, write_csv, write_json

__all__ = [
    "read_csv",
    "read_series_csv",
    "to_epoch_ms",
    "ensure_parent_dir",
    "write_csv",
    "write_json",
]
