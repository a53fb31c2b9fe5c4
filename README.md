# bqdrift

Building blocks for working with versioned BigQuery queries. The package
uses only the standard library.

## What it provides

- `bqdrift.bigquery_error`: structured BigQuery errors, all subclasses of
  `BigQueryError`: `AuthenticationFailed`, `InvalidQuery`, `TableNotFound`,
  `DatasetNotFound`, `AccessDenied`, `QuotaExceeded`, `ResourcesExceeded`,
  `Timeout`, `SchemaMismatch`, `ConnectionFailed`, `InvalidCredentials` and
  `UnknownBigQueryError`. Each has a readable `str()`, a stable
  `error_code()` (for example `"TABLE_NOT_FOUND"`) and a `suggestion()` with
  advice on what to do next. `QueryErrorLocation` holds a line/column
  position inside a SQL statement.
- `bqdrift.errors`: the `BqDriftError` exception family. Each subclass
  renders as `"<prefix>: <detail>"`, for example `FileIncludeError` as
  `"File include error: ..."`. `BigQueryFailure` wraps a `BigQueryError`.
- `bqdrift.error_parser`: `parse_response_error(resp, context)` classifies an
  API error body (`ResponseError` with `code`, `message` and `errors`) into a
  structured error, using an `ErrorContext` that carries the SQL (cut to a
  500-character preview), the operation and the table involved. Helpers:
  `parse_not_found_error`, `extract_query_location`,
  `extract_required_permission` and `extract_quota_type`.
- `bqdrift.dependencies`: `SqlDependencies.extract(sql)` returns the set of
  tables a SQL text reads from (`FROM`, `JOIN`, subqueries, CTE bodies,
  `INSERT ... SELECT`, `CREATE TABLE/VIEW ... AS SELECT`, `MERGE ... USING`).
  CTE names are not counted. Text that cannot be parsed falls back to a
  pattern search, which returns lower-cased names.
  `has_dependency(table)` matches a full name or a trailing `.table` part.
- `bqdrift.preprocessor`: `YamlPreprocessor.process(content, base_dir)`
  replaces `${{ file: path }}` markers with the contents of the named files,
  resolved against `base_dir`. Includes may be nested. Multi-line content in
  a value position becomes a `|` block scalar. A missing file or a circular
  include raises `FileIncludeError`. `has_file_includes` and
  `extract_file_refs` inspect markers without reading any files.
- `bqdrift.resolver`: `VariableResolver` handles references of the form
  `${{ versions.N.field }}`. `extract_version_ref` returns `N`,
  `is_variable_ref` tests for a reference, and `resolve_sql_ref` looks up
  the SQL of version `N` in a mapping. Text that holds no reference is
  returned unchanged. Bad references raise `InvalidVersionRefError` or
  `VariableResolutionError`.

## Installation

```
pip install .
```

## Example

```python
from bqdrift.dependencies import SqlDependencies
from bqdrift.error_parser import ErrorContext, ResponseError, parse_response_error
from bqdrift.resolver import VariableResolver

deps = SqlDependencies.extract("SELECT * FROM analytics.daily_stats")
assert deps.tables == {"analytics.daily_stats"}
assert deps.has_dependency("daily_stats")

ctx = ErrorContext().with_table("my-project", "my_dataset", "my_table")
err = parse_response_error(ResponseError(code=404, message="Table not found"), ctx)
print(err)               # Table not found: my-project.my_dataset.my_table
print(err.error_code())  # TABLE_NOT_FOUND

resolver = VariableResolver()
sql = resolver.resolve_sql_ref("${{ versions.1.sql }}", {1: "SELECT 1"})
assert sql == "SELECT 1"
```

To expand includes, pass the directory the referenced files live in:

```python
from bqdrift.preprocessor import YamlPreprocessor

text = YamlPreprocessor().process("source: ${{ file: query.sql }}", "queries")
```

## What it does not do

The package does not talk to BigQuery. It has no client, does not run
queries, and does not create tables or write partitions. It does not load
complete query definition files or validate them. It has no command-line
program. It classifies error responses that you have already received, and
it prepares SQL and YAML text.

## Running the tests

```
pip install .[test]
pytest
```