"""Exceptions raised by bqdrift."""

from __future__ import annotations

from bqdrift.bigquery_error import BigQueryError


class BqDriftError(Exception):
    """Base class for all bqdrift errors; renders as '<prefix>: <detail>'."""

    prefix = ""

    def __init__(self, detail: object) -> None:
        super().__init__(detail)
        self.detail = detail
        if isinstance(detail, BaseException):
            self.__cause__ = detail

    def __str__(self) -> str:
        if not self.prefix:
            return str(self.detail)
        return f"{self.prefix}: {self.detail}"


class BigQueryFailure(BqDriftError):
    """Wraps a structured BigQuery error."""

    prefix = "BigQuery error"

    def __init__(self, error: BigQueryError) -> None:
        super().__init__(error)
        self.error = error


class ClientError(BqDriftError):
    prefix = "BigQuery client error"


class SchemaError(BqDriftError):
    prefix = "Schema error"


class DslParseError(BqDriftError):
    prefix = "DSL parse error"


class VariableResolutionError(BqDriftError):
    prefix = "Variable resolution error"


class SqlFileNotFoundError(BqDriftError):
    prefix = "SQL file not found"


class YamlFileNotFoundError(BqDriftError):
    prefix = "YAML file not found"


class InvalidVersionRefError(BqDriftError):
    prefix = "Invalid version reference"


class InvalidRevisionRefError(BqDriftError):
    prefix = "Invalid revision reference"


class MigrationError(BqDriftError):
    prefix = "Migration error"


class PartitionError(BqDriftError):
    prefix = "Partition error"


class ClusterError(BqDriftError):
    prefix = "Cluster error"


class InvariantFailedError(BqDriftError):
    prefix = "Invariant check failed"


class ReplError(BqDriftError):
    prefix = "REPL error"


class FileIncludeError(BqDriftError):
    prefix = "File include error"


class IoError(BqDriftError):
    prefix = "IO error"


class YamlError(BqDriftError):
    prefix = "YAML error"


class JsonError(BqDriftError):
    prefix = "JSON error"