"""Expand ``${{ file: path }}`` includes in YAML documents."""

from __future__ import annotations

import os
import re
from pathlib import Path

from bqdrift.errors import FileIncludeError

_FILE_PATTERN = re.compile(r"\$\{\{\s*file:\s*([^\s}]+)\s*\}\}")


def _current_line(content: str, pos: int) -> str:
    """Text of the line holding ``pos``, up to ``pos``."""
    before = content[:pos]
    newline = before.rfind("\n")
    return before if newline < 0 else before[newline + 1 :]


class YamlPreprocessor:
    """Replaces file include markers with the (recursively expanded) file contents."""

    def process(self, content: str, base_dir: str | os.PathLike[str]) -> str:
        """Expand all includes in ``content``, resolving paths against ``base_dir``."""
        return self._process(content, Path(base_dir), set())

    def _process(self, content: str, base_dir: Path, visited: set[Path]) -> str:
        pieces: list[str] = []
        last_end = 0

        for match in _FILE_PATTERN.finditer(content):
            pieces.append(content[last_end : match.start()])

            resolved = base_dir / match.group(1)
            try:
                canonical = resolved.resolve(strict=True)
            except OSError:
                raise FileIncludeError(f"File not found: {resolved}") from None

            if canonical in visited:
                raise FileIncludeError(f"Circular include detected: {canonical}")
            visited.add(canonical)

            try:
                included = canonical.read_text()
            except (OSError, UnicodeDecodeError):
                raise FileIncludeError(f"Failed to read: {canonical}") from None

            processed = self._process(included, canonical.parent, visited)
            indent = self._detect_indent(content, match.start())
            pieces.append(self._apply_indent(processed, indent, match.start(), content))
            last_end = match.end()

            visited.discard(canonical)

        pieces.append(content[last_end:])
        return "".join(pieces)

    @staticmethod
    def _detect_indent(content: str, pos: int) -> str:
        line = _current_line(content, pos)
        return line[: len(line) - len(line.lstrip())]

    @staticmethod
    def _is_yaml_value_position(content: str, pos: int) -> bool:
        line = _current_line(content, pos)
        return ":" in line and line.rstrip().endswith(":")

    def _apply_indent(self, content: str, indent: str, pos: int, original: str) -> str:
        trimmed = content.strip()
        if "\n" not in trimmed:
            return trimmed

        lines = [line.removesuffix("\r") for line in trimmed.split("\n")]

        if self._is_yaml_value_position(original, pos) and len(lines) > 1:
            block = "".join(f"{indent}  {line}\n" for line in lines)
            return f"|\n{block}".rstrip()

        return f"\n{indent}".join(lines)

    def has_file_includes(self, content: str) -> bool:
        """True if ``content`` contains at least one include marker."""
        return _FILE_PATTERN.search(content) is not None

    def extract_file_refs(self, content: str) -> list[str]:
        """Paths named by include markers, in order of appearance."""
        return [match.group(1) for match in _FILE_PATTERN.finditer(content)]