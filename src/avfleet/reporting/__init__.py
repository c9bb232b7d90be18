"""Tabular and JSON export."""

from .export import export_csv, export_json, to_dataframe

__all__ = ["to_dataframe", "export_csv", "export_json"]
