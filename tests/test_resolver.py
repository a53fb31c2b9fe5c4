import pytest

from bqdrift.errors import (
    BqDriftError,
    InvalidVersionRefError,
    VariableResolutionError,
)
from bqdrift.resolver import VariableResolver


@pytest.fixture
def resolver():
    return VariableResolver()


@pytest.mark.parametrize(
    "ref, expected",
    [
        ("${{ versions.1.schema }}", 1),
        ("${{versions.2.sql}}", 2),
        ("${{   versions.15.invariants   }}", 15),
        ("prefix ${{ versions.7.schema }} suffix", 7),
    ],
)
def test_extract_version_ref(resolver, ref, expected):
    assert resolver.extract_version_ref(ref) == expected


@pytest.mark.parametrize(
    "ref",
    ["versions.1.schema", "${{ version.1.schema }}", "${{ versions.x.schema }}", ""],
)
def test_extract_version_ref_invalid(resolver, ref):
    with pytest.raises(InvalidVersionRefError) as excinfo:
        resolver.extract_version_ref(ref)
    assert str(excinfo.value) == f"Invalid version reference: {ref}"


def test_extract_version_ref_overflow(resolver):
    ref = "${{ versions.99999999999.schema }}"
    with pytest.raises(InvalidVersionRefError) as excinfo:
        resolver.extract_version_ref(ref)
    assert ref in str(excinfo.value)


def test_resolve_sql_ref_passes_plain_sql_through(resolver):
    sql = "SELECT * FROM analytics.events WHERE date = @partition_date"
    assert resolver.resolve_sql_ref(sql, {}) == sql


def test_resolve_sql_ref_returns_referenced_sql(resolver):
    sqls = {1: "SELECT 1", 2: "SELECT 2"}
    assert resolver.resolve_sql_ref("${{ versions.2.sql }}", sqls) == "SELECT 2"
    assert resolver.resolve_sql_ref("${{ versions.1.sql }}", sqls) == "SELECT 1"


def test_resolve_sql_ref_wrong_field(resolver):
    with pytest.raises(VariableResolutionError) as excinfo:
        resolver.resolve_sql_ref("${{ versions.1.schema }}", {1: "SELECT 1"})
    assert str(excinfo.value) == (
        "Variable resolution error: Expected 'sql' field, got 'schema'"
    )


def test_resolve_sql_ref_missing_version(resolver):
    with pytest.raises(InvalidVersionRefError) as excinfo:
        resolver.resolve_sql_ref("${{ versions.3.sql }}", {1: "SELECT 1"})
    assert str(excinfo.value) == (
        "Invalid version reference: SQL for version 3 not found"
    )


def test_resolve_sql_ref_errors_share_base_class(resolver):
    with pytest.raises(BqDriftError):
        resolver.resolve_sql_ref("${{ versions.4.sql }}", {})


@pytest.mark.parametrize(
    "text, expected",
    [
        ("${{ versions.1.sql }}", True),
        ("source: ${{ versions.10.schema }}", True),
        ("${{ file: schema.yaml }}", False),
        ("SELECT * FROM t", False),
        ("${{ versions.1 }}", False),
    ],
)
def test_is_variable_ref(resolver, text, expected):
    assert resolver.is_variable_ref(text) is expected


def test_is_variable_ref_agrees_with_extract(resolver):
    for text in ["${{ versions.5.sql }}", "no reference here"]:
        if resolver.is_variable_ref(text):
            assert resolver.extract_version_ref(text) == 5
        else:
            with pytest.raises(InvalidVersionRefError):
                resolver.extract_version_ref(text)