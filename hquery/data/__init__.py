"""Record loading from CSV and JSON files."""

from hquery.data.loader import LoadError, load_csv, load_file, load_json

__all__ = ["LoadError", "load_csv", "load_file", "load_json"]
