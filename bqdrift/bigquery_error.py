"""Structured BigQuery errors with human-readable messages and suggestions."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class QueryErrorLocation:
    """Position of an error inside a SQL statement."""

    line: int | None = None
    column: int | None = None
    offset: int | None = None


class BigQueryError(Exception):
    """Base class for errors reported by BigQuery."""

    _ERROR_CODE = "UNKNOWN"

    def error_code(self) -> str:
        """Return a stable, machine-readable code for this kind of error."""
        return type(self)._ERROR_CODE

    def suggestion(self) -> str:
        """Return advice on how to resolve the error."""
        return (
            "An unexpected error occurred:\n"
            "  • Check the error message for details\n"
            "  • Verify your BigQuery configuration\n"
            "  • Check the BigQuery service status page"
        )


@dataclass(eq=False)
class AuthenticationFailed(BigQueryError):
    reason: str
    help: str = ""

    _ERROR_CODE = "AUTH_FAILED"

    def __str__(self) -> str:
        return f"Authentication failed: {self.reason}"

    def suggestion(self) -> str:
        return (
            "Try:\n"
            "  • Run: gcloud auth application-default login\n"
            "  • Or set GOOGLE_APPLICATION_CREDENTIALS to your service account key file"
        )


@dataclass(eq=False)
class InvalidQuery(BigQueryError):
    sql_preview: str
    message: str
    location: QueryErrorLocation | None = None

    _ERROR_CODE = "INVALID_QUERY"

    def __str__(self) -> str:
        text = f"Invalid SQL: {self.message}"
        loc = self.location
        if loc is not None and loc.line is not None:
            text += f" (line {loc.line}"
            if loc.column is not None:
                text += f", column {loc.column}"
            text += ")"
        if self.sql_preview:
            text += f"\n\nSQL preview:\n  {self.sql_preview}"
        return text

    def suggestion(self) -> str:
        return (
            "Check your SQL for:\n"
            "  • Syntax errors (typos, missing keywords)\n"
            "  • Correct table/column names\n"
            "  • Proper quoting for identifiers"
        )


@dataclass(eq=False)
class TableNotFound(BigQueryError):
    project: str
    dataset: str
    table: str

    _ERROR_CODE = "TABLE_NOT_FOUND"

    def __str__(self) -> str:
        return f"Table not found: {self.project}.{self.dataset}.{self.table}"

    def suggestion(self) -> str:
        return (
            "Verify the table exists:\n"
            f"  • Run: bq show {self.project}:{self.dataset}.{self.table}\n"
            "  • Check for typos in the table name\n"
            "  • Ensure you have access to the dataset"
        )


@dataclass(eq=False)
class DatasetNotFound(BigQueryError):
    project: str
    dataset: str

    _ERROR_CODE = "DATASET_NOT_FOUND"

    def __str__(self) -> str:
        return f"Dataset not found: {self.project}.{self.dataset}"

    def suggestion(self) -> str:
        return (
            "Verify the dataset exists:\n"
            f"  • Run: bq show {self.project}:{self.dataset}\n"
            "  • Check for typos in the dataset name\n"
            "  • Ensure you have access to the project"
        )


@dataclass(eq=False)
class AccessDenied(BigQueryError):
    resource: str
    required_permission: str | None = None

    _ERROR_CODE = "ACCESS_DENIED"

    def __str__(self) -> str:
        text = f"Access denied to {self.resource}"
        if self.required_permission is not None:
            text += f" (requires {self.required_permission})"
        return text

    def suggestion(self) -> str:
        perm = self.required_permission or "bigquery.tables.getData"
        return (
            f"Request access to {self.resource}:\n"
            f"  • Required permission: {perm}\n"
            "  • Contact your project admin\n"
            "  • Or run: gcloud projects add-iam-policy-binding PROJECT_ID \\\n"
            "    --member=user:YOUR_EMAIL --role=roles/bigquery.dataViewer"
        )


@dataclass(eq=False)
class QuotaExceeded(BigQueryError):
    quota_type: str
    message: str

    _ERROR_CODE = "QUOTA_EXCEEDED"

    def __str__(self) -> str:
        return f"Quota exceeded ({self.quota_type}): {self.message}"

    def suggestion(self) -> str:
        return (
            f"Quota '{self.quota_type}' exceeded:\n"
            "  • Wait and retry later\n"
            "  • Request quota increase in Cloud Console\n"
            "  • Optimize query to use fewer resources"
        )


@dataclass(eq=False)
class ResourcesExceeded(BigQueryError):
    message: str
    suggestion_text: str

    _ERROR_CODE = "RESOURCES_EXCEEDED"

    def __str__(self) -> str:
        return f"Resources exceeded: {self.message}"

    def suggestion(self) -> str:
        return self.suggestion_text


@dataclass(eq=False)
class Timeout(BigQueryError):
    operation: str
    duration_ms: int | None = None

    _ERROR_CODE = "TIMEOUT"

    def __str__(self) -> str:
        text = f"Timeout during {self.operation}"
        if self.duration_ms is not None:
            text += f" (after {self.duration_ms}ms)"
        return text

    def suggestion(self) -> str:
        return (
            f"Operation '{self.operation}' timed out:\n"
            "  • Reduce query complexity\n"
            "  • Add filters to reduce data scanned\n"
            "  • Consider partitioning your tables"
        )


@dataclass(eq=False)
class SchemaMismatch(BigQueryError):
    message: str
    field: str | None = None

    _ERROR_CODE = "SCHEMA_MISMATCH"

    def __str__(self) -> str:
        text = "Schema mismatch"
        if self.field is not None:
            text += f" on field '{self.field}'"
        return f"{text}: {self.message}"

    def suggestion(self) -> str:
        field_info = f" for field '{self.field}'" if self.field is not None else ""
        return (
            f"Schema mismatch{field_info}:\n"
            "  • Check column types match expected schema\n"
            "  • Verify nullable/required settings\n"
            "  • Run: bq show --schema PROJECT:DATASET.TABLE"
        )


@dataclass(eq=False)
class ConnectionFailed(BigQueryError):
    reason: str

    _ERROR_CODE = "CONNECTION_FAILED"

    def __str__(self) -> str:
        return f"Connection failed: {self.reason}"

    def suggestion(self) -> str:
        return (
            "Connection failed:\n"
            "  • Check your internet connection\n"
            "  • Verify BigQuery API is enabled for your project\n"
            "  • Try again in a few moments"
        )


@dataclass(eq=False)
class InvalidCredentials(BigQueryError):
    reason: str
    path: str | None = None

    _ERROR_CODE = "INVALID_CREDENTIALS"

    def __str__(self) -> str:
        text = f"Invalid credentials: {self.reason}"
        if self.path is not None:
            text += f" (path: {self.path})"
        return text

    def suggestion(self) -> str:
        path_info = f" ({self.path})" if self.path is not None else ""
        return (
            f"Invalid credentials{path_info}:\n"
            "  • Check GOOGLE_APPLICATION_CREDENTIALS path\n"
            "  • Verify the service account key is valid\n"
            "  • Run: gcloud auth application-default login"
        )


@dataclass(eq=False)
class UnknownBigQueryError(BigQueryError):
    message: str
    code: str | None = None
    raw_error: str = ""

    _ERROR_CODE = "UNKNOWN"

    def __str__(self) -> str:
        if self.code is not None:
            return f"BigQuery error [{self.code}]: {self.message}"
        return f"BigQuery error: {self.message}"