"""Detection of function definitions and their line ranges in C sources."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

MAX_NAME_LENGTH = 50

_LINE_LIMIT = 255
_NOT_A_SIGNATURE = ("=", "if", "for", "while", "#include", "#define")
_SAFETY_EXCLUDES = ("=", "if", "for", "while")
_TYPE_KEYWORDS = ("int ", "void ", "char ", "float ", "double ", "long ", "struct ")


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
class FunctionInfo:
    """A function found in the source; ``end_line`` is -1 until its end is known."""

    name: str
    start_line: int
    end_line: int = -1


def extract_function(line) -> str | None:
    """Return the identifier directly before the first ``(`` in ``line``."""
    open_paren = line.find("(")
    if open_paren <= 0:
        return None
    name_last = open_paren - 1
    while name_last > 0 and line[name_last] == " ":
        name_last -= 1
    name_first = name_last
    while name_first > 0 and _is_word_char(line[name_first]):
        name_first -= 1
    if not _is_word_char(line[name_first]):
        name_first += 1
    name_len = name_last - name_first + 1
    if name_len <= 0 or name_len >= MAX_NAME_LENGTH:
        return None
    return line[name_first:name_first + name_len]


def scan_functions(lines: Iterable[str]) -> list[FunctionInfo]:
    """Find function definitions in ``lines`` by tracking braces."""
    functions: list[FunctionInfo] = []
    current: FunctionInfo | None = None
    brace_count = 0
    in_function = False
    line_count = 0

    for line_number, line in enumerate(lines, start=1):
        line_count = line_number
        if (
            not in_function
            and "(" in line
            and not any(word in line for word in _NOT_A_SIGNATURE)
        ):
            name = extract_function(line)
            if name:
                current = FunctionInfo(name, line_number)
                functions.append(current)
                in_function = True
                brace_count = 1 if "{" in line else 0

        if not in_function:
            continue

        brace_count += line.count("{")
        for _ in range(line.count("}")):
            brace_count -= 1
            if brace_count == 0:
                current.end_line = line_number
                in_function = False

        if (
            "(" in line
            and not any(word in line for word in _SAFETY_EXCLUDES)
            and any(keyword in line for keyword in _TYPE_KEYWORDS)
        ):
            if current is not None:
                current.end_line = line_number - 1
            if extract_function(line):
                brace_count = 1 if "{" in line else 0

    if in_function and current is not None:
        current.end_line = line_count
    return functions


def extract_all_functions(path) -> list[FunctionInfo]:
    """Scan the C source file at ``path`` for function definitions."""
    return scan_functions(_read_lines(path))


def format_functions(functions: Iterable[FunctionInfo]) -> str:
    """Render a function report."""
    entries = list(functions)
    if not entries:
        return "No functions found!\n"
    parts = ["\n===== FUNCTIONS DETECTED =====\n\n"]
    for count, func in enumerate(entries, start=1):
        parts.append(f"Function #{count}: {func.name}\tFrom line: {func.start_line}\n\n")
    return "".join(parts)