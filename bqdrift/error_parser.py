"""Turn raw BigQuery API error responses into structured errors."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace

from bqdrift.bigquery_error import (
    AccessDenied,
    BigQueryError,
    DatasetNotFound,
    InvalidQuery,
    QueryErrorLocation,
    QuotaExceeded,
    ResourcesExceeded,
    TableNotFound,
    Timeout,
    UnknownBigQueryError,
)

_SQL_PREVIEW_LIMIT = 500
_U32_MAX = 2**32 - 1

_TABLE_RE = re.compile(r"table\s+([^:\s]+):([^.\s]+)\.(\S+)", re.IGNORECASE)
_DATASET_RE = re.compile(r"dataset\s+([^:\s]+):(\S+)", re.IGNORECASE)
_BRACKET_LOCATION_RE = re.compile(r"\[(\d+):(\d+)\]")
_VERBOSE_LOCATION_RE = re.compile(r"line\s+(\d+).*column\s+(\d+)")
_PERMISSION_RE = re.compile(r"(bigquery\.[a-zA-Z.]+)")

_RESOURCES_EXCEEDED_ADVICE = (
    "Try:\n"
    "  • Add filters to reduce data scanned\n"
    "  • Use LIMIT clause for testing\n"
    "  • Partition tables by date\n"
    "  • Break query into smaller parts"
)

_RESPONSE_TOO_LARGE_ADVICE = (
    "Response too large. Try:\n"
    "  • Add LIMIT clause\n"
    "  • Export to GCS instead\n"
    "  • Remove ORDER BY if not needed"
)

_QUOTA_KEYWORDS = (
    ("concurrent", "concurrent queries"),
    ("daily", "daily query limit"),
    ("rate", "rate limit"),
    ("bytes", "bytes scanned"),
)


@dataclass(frozen=True)
class ErrorContext:
    """What was being done when an error occurred; used to enrich messages."""

    sql: str | None = None
    operation: str | None = None
    resource: str | None = None
    project: str | None = None
    dataset: str | None = None
    table: str | None = None

    def with_sql(self, sql: str) -> ErrorContext:
        """Return a copy carrying a preview of ``sql`` (at most 500 characters)."""
        if len(sql) > _SQL_PREVIEW_LIMIT:
            sql = f"{sql[:_SQL_PREVIEW_LIMIT]}..."
        return replace(self, sql=sql)

    def with_operation(self, op: str) -> ErrorContext:
        """Return a copy naming the operation in progress."""
        return replace(self, operation=op)

    def with_table(self, project: str, dataset: str, table: str) -> ErrorContext:
        """Return a copy naming the table involved, also set as the resource."""
        return replace(
            self,
            project=project,
            dataset=dataset,
            table=table,
            resource=f"{project}.{dataset}.{table}",
        )


@dataclass(frozen=True)
class ResponseError:
    """An error body returned by the BigQuery REST API."""

    code: int
    message: str
    errors: list[dict[str, str]] = field(default_factory=list)

    @property
    def reason(self) -> str | None:
        """The reason of the first listed error, if any."""
        if not self.errors:
            return None
        return self.errors[0].get("reason")


def parse_response_error(resp: ResponseError, context: ErrorContext) -> BigQueryError:
    """Classify an API error response into a structured BigQuery error."""
    status = resp.code
    message = resp.message
    reason = resp.reason
    raw = repr(resp)

    if status == 400:
        if reason == "invalidQuery":
            return InvalidQuery(
                sql_preview=context.sql or "",
                message=message,
                location=extract_query_location(message),
            )
        if reason == "invalid":
            lowered = message.lower()
            if "syntax" in lowered or "query" in lowered:
                return InvalidQuery(
                    sql_preview=context.sql or "",
                    message=message,
                    location=extract_query_location(message),
                )
            return UnknownBigQueryError(message=message, code="invalid", raw_error=raw)
        if reason == "resourcesExceeded":
            return ResourcesExceeded(
                message=message, suggestion_text=_RESOURCES_EXCEEDED_ADVICE
            )
        if reason == "timeout":
            return Timeout(operation=context.operation or "query", duration_ms=None)
        if reason == "backendError":
            return UnknownBigQueryError(
                message=f"BigQuery backend error: {message}",
                code="backendError",
                raw_error=raw,
            )
    elif status == 403:
        if reason == "accessDenied":
            return AccessDenied(
                resource=context.resource or "resource",
                required_permission=extract_required_permission(message),
            )
        if reason in ("quotaExceeded", "rateLimitExceeded"):
            return QuotaExceeded(
                quota_type=extract_quota_type(message) or "API", message=message
            )
        if reason == "responseTooLarge":
            return ResourcesExceeded(
                message=message, suggestion_text=_RESPONSE_TOO_LARGE_ADVICE
            )
    elif status == 404:
        return parse_not_found_error(message, context)
    elif status == 409:
        if reason == "duplicate":
            return UnknownBigQueryError(
                message=f"Resource already exists: {message}",
                code="duplicate",
                raw_error=raw,
            )

    if 500 <= status <= 599:
        return UnknownBigQueryError(
            message=f"BigQuery server error: {message}",
            code=f"HTTP_{status}",
            raw_error=raw,
        )

    return UnknownBigQueryError(message=message, code=reason, raw_error=raw)


def parse_not_found_error(message: str, context: ErrorContext) -> BigQueryError:
    """Interpret a 404 message as a missing table or dataset where possible."""
    lowered = message.lower()

    if "table" in lowered or "not found" in lowered:
        match = _TABLE_RE.search(message)
        if match:
            return TableNotFound(
                project=match.group(1), dataset=match.group(2), table=match.group(3)
            )
        if context.project and context.dataset and context.table:
            if None not in (context.project, context.dataset, context.table):
                return TableNotFound(
                    project=context.project,
                    dataset=context.dataset,
                    table=context.table,
                )
        elif (
            context.project is not None
            and context.dataset is not None
            and context.table is not None
        ):
            return TableNotFound(
                project=context.project, dataset=context.dataset, table=context.table
            )

    if "dataset" in lowered:
        match = _DATASET_RE.search(message)
        if match:
            return DatasetNotFound(project=match.group(1), dataset=match.group(2))
        if context.project is not None and context.dataset is not None:
            return DatasetNotFound(project=context.project, dataset=context.dataset)

    return UnknownBigQueryError(message=message, code="notFound", raw_error=message)


def _parse_u32(text: str) -> int | None:
    value = int(text)
    return value if value <= _U32_MAX else None


def extract_query_location(message: str) -> QueryErrorLocation | None:
    """Find a line/column position in a query error message."""
    match = _BRACKET_LOCATION_RE.search(message) or _VERBOSE_LOCATION_RE.search(
        message
    )
    if match is None:
        return None
    return QueryErrorLocation(
        line=_parse_u32(match.group(1)),
        column=_parse_u32(match.group(2)),
        offset=None,
    )


def extract_required_permission(message: str) -> str | None:
    """Find a ``bigquery.*`` permission name in a message."""
    match = _PERMISSION_RE.search(message)
    return match.group(1) if match else None


def extract_quota_type(message: str) -> str | None:
    """Guess which quota a quota error refers to."""
    lowered = message.lower()
    for keyword, quota in _QUOTA_KEYWORDS:
        if keyword in lowered:
            return quota
    return None