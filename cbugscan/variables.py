"""Variable tracking for C sources: declarations, allocations, frees and use-after-free."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

POINTER = "pointer"
MAX_NAME_LENGTH = 50
MAX_TYPE_LENGTH = 20

_LINE_LIMIT = 255
_C_SPACE = " \t\n\v\f\r"
_DECLARATION_KEYWORDS = ("int ", "char ", "float ", "double ", "long ", "short ", "struct ")
_NAME_TERMINATORS = ";=,[(\n"
_TOKEN_SPLIT = re.compile(r"[ \t\n\r(){}\[\];,=.+\-/%*&|!<>]+")


def _is_space(char: str) -> bool:
    return char != "" and char in _C_SPACE


def _is_word_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


def _read_lines(path: str | Path) -> Iterator[str]:
    """Yield the lines of a file in chunks of at most 255 characters."""
    with open(path, encoding="utf-8", errors="replace") as handle:
        for raw in handle:
            while len(raw) > _LINE_LIMIT:
                yield raw[:_LINE_LIMIT]
                raw = raw[_LINE_LIMIT:]
            yield raw


@dataclass
class VariableInfo:
    """A variable seen in the source, with its allocation state."""

    name: str
    type: str
    declaration_line: int
    is_initialized: bool
    is_freed: bool = False
    freed_line: int = 0


class VariableTracker:
    """An ordered collection of variables plus the diagnostics found while tracking them."""

    def __init__(self):
        self._variables: list[VariableInfo] = []
        self.diagnostics: list[str] = []

    def add(self, name, type, line, initialized) -> VariableInfo:
        info = VariableInfo(name, type, line, bool(initialized))
        self._variables.append(info)
        return info

    def find(self, name) -> VariableInfo | None:
        return next((var for var in self._variables if var.name == name), None)

    def mark_freed(self, name, line_number) -> list[str]:
        """Record a free of ``name``; return any double-free or untracked warnings."""
        messages: list[str] = []
        var = self.find(name)
        if var is None:
            messages.append(
                f"Warning: Attempt to free untracked variable '{name}' at line {line_number}."
            )
        elif var.type == POINTER:
            if var.is_freed:
                messages.append(
                    f"Error: Double free detected for variable '{var.name}' at line "
                    f"{line_number} (previously freed at line {var.freed_line})."
                )
            else:
                var.is_freed = True
                var.freed_line = line_number
        self.diagnostics.extend(messages)
        return messages

    def check_use_after_free(self, line, line_number) -> list[str]:
        """Report uses of already freed pointers on ``line``."""
        messages: list[str] = []
        for var in self._variables:
            if not (var.is_freed and var.type == POINTER):
                continue
            deref = f"*{var.name}"
            pos = line.find(deref)
            if pos != -1:
                following = line[pos + len(deref):pos + len(deref) + 1]
                if not _is_word_char(following) and f"free({deref})" not in line:
                    messages.append(
                        f"Error: Potential use-after-free. Variable '{var.name}' (freed at line "
                        f"{var.freed_line}) seems to be dereferenced at line {line_number}."
                    )
            if f"{var.name}->" in line:
                messages.append(
                    f"Error: Potential use-after-free. Variable '{var.name}' (freed at line "
                    f"{var.freed_line}) seems to be used with '->' operator at line {line_number}."
                )
            tokens = [token for token in _TOKEN_SPLIT.split(line) if token]
            if (
                var.name in tokens
                and f"free({var.name})" not in line
                and line_number > var.declaration_line
            ):
                messages.append(
                    f"Error: Potential use-after-free. Variable '{var.name}' (freed at line "
                    f"{var.freed_line}) seems to be used as a token at line {line_number}."
                )
        self.diagnostics.extend(messages)
        return messages

    def record_allocation(self, name, line_number) -> VariableInfo:
        """Mark ``name`` as holding freshly allocated memory."""
        var = self.find(name)
        if var is None:
            return self.add(name, POINTER, line_number, True)
        var.type = POINTER
        var.is_initialized = True
        var.is_freed = False
        var.freed_line = 0
        return var

    def __iter__(self) -> Iterator[VariableInfo]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)


def extract_variable_from_declaration(line) -> str | None:
    """Return the declared name that follows the first word of ``line``."""
    pos = 0
    length = len(line)
    while pos < length and _is_space(line[pos]):
        pos += 1
    if pos == length:
        return None
    while pos < length and not _is_space(line[pos]):
        pos += 1
    while pos < length and _is_space(line[pos]):
        pos += 1
    if pos == length or line[pos] == ";":
        return None
    end = next((i for i in range(pos, length) if line[i] in _NAME_TERMINATORS), None)
    if end is None:
        return None
    name_len = end - pos
    if name_len <= 0 or name_len >= MAX_NAME_LENGTH:
        return None
    name = line[pos:end].rstrip(_C_SPACE)
    return name or None


def extract_variable_from_allocation(line) -> str | None:
    """Return the identifier directly left of the first ``=`` in ``line``."""
    equals = line.find("=")
    if equals <= 0:
        return None
    name_start = equals - 1
    while name_start > 0 and line[name_start] == " ":
        name_start -= 1
    before = name_start
    while before > 0 and _is_word_char(line[before]):
        before -= 1
    name_len = name_start - before
    if name_len <= 0 or name_len >= MAX_NAME_LENGTH:
        return None
    return line[before + 1:before + 1 + name_len]


def extract_variable_from_free(line) -> str | None:
    """Return the argument of the first ``free(...)`` call, trimmed of spaces."""
    start = line.find("free(")
    if start == -1:
        return None
    start += len("free(")
    close = line.find(")", start)
    if close == -1:
        return None
    name_len = close - start
    if name_len <= 0 or name_len >= MAX_NAME_LENGTH:
        return None
    return line[start:close].strip(" ")


def is_variable_declaration(line) -> bool:
    return any(keyword in line for keyword in _DECLARATION_KEYWORDS)


def is_initialized(line) -> bool:
    return "=" in line


def extract_variable_type(line) -> str | None:
    """Return the first word of ``line``, stopping at whitespace or ``*``."""
    pos = 0
    length = len(line)
    while pos < length and _is_space(line[pos]):
        pos += 1
    if pos == length:
        return None
    end = pos
    while end < length and not _is_space(line[end]) and line[end] != "*":
        end += 1
    type_len = end - pos
    if type_len <= 0 or type_len >= MAX_TYPE_LENGTH:
        return None
    return line[pos:end]


def scan_variables(lines: Iterable[str]) -> VariableTracker:
    """Track variables across ``lines``, collecting memory diagnostics on the tracker."""
    tracker = VariableTracker()
    for line_number, line in enumerate(lines, start=1):
        tracker.check_use_after_free(line, line_number)

        if is_variable_declaration(line):
            name = extract_variable_from_declaration(line)
            var_type = extract_variable_type(line)
            if name is not None and var_type is not None and tracker.find(name) is None:
                tracker.add(name, var_type, line_number, is_initialized(line))

        if "malloc" in line or "calloc" in line:
            name = extract_variable_from_allocation(line)
            if name is not None:
                tracker.record_allocation(name, line_number)

        if "free(" in line:
            name = extract_variable_from_free(line)
            if name is not None:
                tracker.mark_freed(name, line_number)
    return tracker


def extract_all_variables(path) -> VariableTracker:
    """Scan the C source file at ``path`` for variables."""
    return scan_variables(_read_lines(path))


def format_variables(variables: Iterable[VariableInfo]) -> str:
    """Render a variable report."""
    entries = list(variables)
    if not entries:
        return "No variables found.\n"
    parts = ["Variables Detected:\n\n"]
    for var in entries:
        parts.append(
            f"Name: {var.name}\nType: {var.type}\nLine: {var.declaration_line}"
            f"\tInitialised: {'Yes' if var.is_initialized else 'No'}"
            f"\tfreed: {'Yes' if var.is_freed else 'No'}\n\n"
        )
    return "".join(parts)