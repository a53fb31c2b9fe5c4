"""BigQuery helpers: structured errors, SQL dependency extraction, YAML includes and version references."""

__version__ = "0.1.0"

__all__ = [
    "bigquery_error",
    "errors",
    "error_parser",
    "dependencies",
    "preprocessor",
    "resolver",
]