import copy

import pytest

from bqdrift.bigquery_error import (
    AccessDenied,
    AuthenticationFailed,
    BigQueryError,
    ConnectionFailed,
    DatasetNotFound,
    InvalidCredentials,
    InvalidQuery,
    QueryErrorLocation,
    QuotaExceeded,
    ResourcesExceeded,
    SchemaMismatch,
    TableNotFound,
    Timeout,
    UnknownBigQueryError,
)


@pytest.mark.parametrize(
    "err, code",
    [
        (AuthenticationFailed(reason="test", help="help"), "AUTH_FAILED"),
        (InvalidQuery(sql_preview="", message="", location=None), "INVALID_QUERY"),
        (TableNotFound(project="p", dataset="d", table="t"), "TABLE_NOT_FOUND"),
        (DatasetNotFound(project="p", dataset="d"), "DATASET_NOT_FOUND"),
        (AccessDenied(resource="r", required_permission=None), "ACCESS_DENIED"),
        (QuotaExceeded(quota_type="q", message="m"), "QUOTA_EXCEEDED"),
        (ResourcesExceeded(message="m", suggestion_text="s"), "RESOURCES_EXCEEDED"),
        (Timeout(operation="o", duration_ms=None), "TIMEOUT"),
        (SchemaMismatch(message="m", field=None), "SCHEMA_MISMATCH"),
        (ConnectionFailed(reason="r"), "CONNECTION_FAILED"),
        (InvalidCredentials(reason="r", path=None), "INVALID_CREDENTIALS"),
        (UnknownBigQueryError(message="m", code=None, raw_error="r"), "UNKNOWN"),
    ],
)
def test_error_codes(err, code):
    assert err.error_code() == code


def test_display_authentication_failed():
    err = AuthenticationFailed(reason="No token available", help="Run gcloud auth")
    assert str(err) == "Authentication failed: No token available"


def test_display_invalid_query_with_location():
    err = InvalidQuery(
        sql_preview="SELECT * FROM",
        message="Syntax error",
        location=QueryErrorLocation(line=1, column=15, offset=None),
    )
    display = str(err)
    assert "Invalid SQL: Syntax error" in display
    assert "line 1" in display
    assert "column 15" in display
    assert "SELECT * FROM" in display


def test_display_invalid_query_without_location():
    err = InvalidQuery(sql_preview="", message="Unknown error", location=None)
    assert str(err) == "Invalid SQL: Unknown error"


def test_display_table_not_found():
    err = TableNotFound(project="my-project", dataset="my_dataset", table="my_table")
    assert str(err) == "Table not found: my-project.my_dataset.my_table"


def test_display_dataset_not_found():
    err = DatasetNotFound(project="my-project", dataset="my_dataset")
    assert str(err) == "Dataset not found: my-project.my_dataset"


def test_display_access_denied_with_permission():
    err = AccessDenied(
        resource="project.dataset.table",
        required_permission="bigquery.tables.getData",
    )
    display = str(err)
    assert "Access denied to project.dataset.table" in display
    assert "requires bigquery.tables.getData" in display


def test_display_access_denied_without_permission():
    err = AccessDenied(resource="my_resource", required_permission=None)
    assert str(err) == "Access denied to my_resource"


def test_display_quota_exceeded():
    err = QuotaExceeded(quota_type="daily query limit", message="Exceeded 1TB")
    assert str(err) == "Quota exceeded (daily query limit): Exceeded 1TB"


def test_display_timeout_with_duration():
    err = Timeout(operation="query", duration_ms=30000)
    assert str(err) == "Timeout during query (after 30000ms)"


def test_display_timeout_without_duration():
    err = Timeout(operation="export", duration_ms=None)
    assert str(err) == "Timeout during export"


def test_display_schema_mismatch_with_field():
    err = SchemaMismatch(message="Expected INT64, got STRING", field="user_id")
    assert str(err) == "Schema mismatch on field 'user_id': Expected INT64, got STRING"


def test_display_schema_mismatch_without_field():
    err = SchemaMismatch(message="Column count mismatch", field=None)
    assert str(err) == "Schema mismatch: Column count mismatch"


def test_display_connection_failed():
    err = ConnectionFailed(reason="Network unreachable")
    assert str(err) == "Connection failed: Network unreachable"


def test_display_invalid_credentials_with_path():
    err = InvalidCredentials(path="/path/to/key.json", reason="File not found")
    display = str(err)
    assert "Invalid credentials: File not found" in display
    assert "path: /path/to/key.json" in display


def test_display_unknown_with_code():
    err = UnknownBigQueryError(
        code="INTERNAL", message="Something went wrong", raw_error="raw"
    )
    assert str(err) == "BigQuery error [INTERNAL]: Something went wrong"


def test_display_unknown_without_code():
    err = UnknownBigQueryError(code=None, message="Unknown error", raw_error="raw")
    assert str(err) == "BigQuery error: Unknown error"


def test_suggestion_table_not_found():
    err = TableNotFound(project="proj", dataset="ds", table="tbl")
    suggestion = err.suggestion()
    assert "bq show proj:ds.tbl" in suggestion
    assert "Check for typos" in suggestion


def test_suggestion_dataset_not_found():
    err = DatasetNotFound(project="proj", dataset="ds")
    assert "bq show proj:ds" in err.suggestion()


def test_suggestion_access_denied():
    err = AccessDenied(
        resource="my_table", required_permission="bigquery.tables.getData"
    )
    suggestion = err.suggestion()
    assert "bigquery.tables.getData" in suggestion
    assert "gcloud projects add-iam-policy-binding" in suggestion


def test_suggestion_access_denied_default_permission():
    err = AccessDenied(resource="my_table")
    assert "Required permission: bigquery.tables.getData" in err.suggestion()


def test_suggestion_quota_exceeded():
    err = QuotaExceeded(quota_type="concurrent queries", message="limit reached")
    suggestion = err.suggestion()
    assert "concurrent queries" in suggestion
    assert "Wait and retry" in suggestion


def test_suggestion_timeout():
    err = Timeout(operation="big_query", duration_ms=None)
    suggestion = err.suggestion()
    assert "big_query" in suggestion
    assert "Reduce query complexity" in suggestion


def test_suggestion_schema_mismatch_with_field():
    err = SchemaMismatch(message="type error", field="amount")
    suggestion = err.suggestion()
    assert "field 'amount'" in suggestion
    assert "bq show --schema" in suggestion


def test_suggestion_invalid_credentials_with_path():
    err = InvalidCredentials(path="/my/path.json", reason="invalid")
    suggestion = err.suggestion()
    assert "/my/path.json" in suggestion
    assert "GOOGLE_APPLICATION_CREDENTIALS" in suggestion


def test_suggestion_resources_exceeded_uses_given_text():
    err = ResourcesExceeded(message="m", suggestion_text="Add a LIMIT")
    assert err.suggestion() == "Add a LIMIT"


def test_bigquery_error_is_exception():
    err = UnknownBigQueryError(code=None, message="test", raw_error="raw")
    assert isinstance(err, BigQueryError)
    assert isinstance(err, Exception)
    assert err.error_code() == "UNKNOWN"
    assert str(err) == "BigQuery error: test"


def test_query_error_location_debug():
    loc = QueryErrorLocation(line=10, column=5, offset=100)
    debug = repr(loc)
    assert "10" in debug
    assert "5" in debug
    assert "100" in debug