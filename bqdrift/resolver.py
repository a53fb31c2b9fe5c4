"""Resolve ``${{ versions.N.field }}`` references between query versions."""

from __future__ import annotations

import re
from collections.abc import Mapping

from bqdrift.errors import InvalidVersionRefError, VariableResolutionError

_VARIABLE_PATTERN = re.compile(r"\$\{\{\s*versions\.(\d+)\.(\w+)\s*\}\}")
_U32_MAX = 2**32 - 1


class VariableResolver:
    """Looks up values of earlier versions named by ``${{ versions.N.field }}``."""

    def _match(self, text: str) -> re.Match[str] | None:
        return _VARIABLE_PATTERN.search(text)

    @staticmethod
    def _version_number(match: re.Match[str], ref_str: str) -> int:
        try:
            version = int(match.group(1))
        except ValueError:
            raise InvalidVersionRefError(ref_str) from None
        if version > _U32_MAX:
            raise InvalidVersionRefError(ref_str)
        return version

    def extract_version_ref(self, ref_str: str) -> int:
        """Return the version number named by a reference in ``ref_str``."""
        match = self._match(ref_str)
        if match is None:
            raise InvalidVersionRefError(ref_str)
        return self._version_number(match, ref_str)

    def resolve_sql_ref(self, sql_ref: str, resolved_sqls: Mapping[int, str]) -> str:
        """Return the SQL of the referenced version, or ``sql_ref`` itself if it is not a reference."""
        match = self._match(sql_ref)
        if match is None:
            return sql_ref

        version = self._version_number(match, sql_ref)
        field_name = match.group(2)
        if field_name != "sql":
            raise VariableResolutionError(
                f"Expected 'sql' field, got '{field_name}'"
            )

        try:
            return resolved_sqls[version]
        except KeyError:
            raise InvalidVersionRefError(
                f"SQL for version {version} not found"
            ) from None

    def is_variable_ref(self, s: str) -> bool:
        """True if ``s`` contains a version reference."""
        return self._match(s) is not None