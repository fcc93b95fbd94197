"""Line-based bug detection for C sources and the command-line report."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from .functions import extract_all_functions, format_functions
from .recursion import detect_infinite_recursion
from .variables import (
    MAX_NAME_LENGTH,
    VariableTracker,
    extract_all_variables,
    extract_variable_from_declaration,
    extract_variable_type,
    format_variables,
    is_initialized,
    is_variable_declaration,
)

DEFAULT_SOURCE = "testcase.txt"

_LINE_LIMIT = 99
_C_SPACE = " \t\n\v\f\r"
_OPENING = {"(": ")", "{": "}", "[": "]"}
_CLOSING = {")": "(", "}": "{", "]": "["}

_NEEDS_SEMICOLON = (
    "return", "printf", "scanf", "malloc", "free", "calloc", "realloc", "exit",
    "abort", "atexit", "strcpy", "strcat", "strlen", "strcmp", "strncpy", "strncat",
    "strncmp", "strstr", "strchr", "strrchr", "strspn", "strcspn", "strpbrk",
    "strtok", "strerror", "strtol", "strtoul", "strtod", "++", "=", "+=", "-=",
    "*=", "/=", "%=", "&=", "|=", "^=", "?",
)
_NO_SEMICOLON = ("{", "}", "if", "else", "#include", "#define")
_DECLARATION_WORDS = ("int ", "char ", "float ", "double ", "void ", "struct ")
_ZERO_DIVISIONS = ("/0", "%0", "/ 0", "% 0", "0 %", "0%")
_UNSAFE_STRING_CALLS = ("strcpy", "strcat", "strcmp")
_BOUNDED_STRING_CALLS = ("strncpy", "strncat", "strncmp")
_CALLS_NEEDING_ARGUMENTS = ("free", "malloc", "calloc", "realloc", "exit")


@dataclass(frozen=True)
class Bug:
    """A problem found in the source: its kind, line and a description."""

    type: str
    line: int
    description: str


def _read_lines(path: str | Path) -> Iterator[str]:
    """Yield the lines of a file in chunks of at most 99 characters."""
    with open(path, encoding="utf-8", errors="replace") as handle:
        for raw in handle:
            while len(raw) > _LINE_LIMIT:
                yield raw[:_LINE_LIMIT]
                raw = raw[_LINE_LIMIT:]
            yield raw


def _is_word_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


def _is_skipped(line: str) -> bool:
    """Blank lines, comment delimiters and preprocessor directives."""
    return (
        line.startswith("\n")
        or line.startswith(("//", "/*", "*/"))
        or line.startswith("#")
    )


def _lacks_parentheses(line: str) -> bool:
    return "(" not in line or ")" not in line


def check_brackets(lines: Iterable[str]) -> list[Bug]:
    """Report unexpected, mismatched and unclosed brackets."""
    bugs: list[Bug] = []
    stack: list[tuple[str, int]] = []
    for line_number, line in enumerate(lines, start=1):
        for char in line:
            if char in _OPENING:
                stack.append((char, line_number))
            elif char in _CLOSING:
                if not stack:
                    bugs.append(Bug(
                        "Bracket Error", line_number,
                        f"Unexpected closing bracket '{char}' with no matching opening bracket",
                    ))
                    continue
                top, _ = stack.pop()
                if top != _CLOSING[char]:
                    bugs.append(Bug(
                        "Bracket Error", line_number,
                        f"Mismatched bracket: expected '{_OPENING[top]}' but found '{char}'",
                    ))
    for char, line_number in reversed(stack):
        bugs.append(Bug(
            "Bracket Error", line_number,
            f"Unclosed bracket '{char}' - missing '{_OPENING[char]}'",
        ))
    return bugs


def _should_end_with_semicolon(line: str) -> bool:
    needed = False
    if any(word in line for word in _NEEDS_SEMICOLON):
        needed = not (
            any(word in line for word in _NO_SEMICOLON)
            or ("for" in line and "(" in line)
            or ("while" in line and "(" in line)
        )
    if any(word in line for word in _DECLARATION_WORDS) and "{" not in line:
        needed = True
    return needed


def _extra_semicolon_count(line: str) -> int:
    """Count runs of repeated semicolons outside string literals."""
    found = 0
    in_string = False
    consecutive = 0
    for char in line:
        if char == '"':
            in_string = not in_string
        if not in_string and char == ";":
            consecutive += 1
            if consecutive > 1:
                found += 1
                consecutive = 0
        elif not in_string and char not in _C_SPACE:
            consecutive = 0
    return found


def check_semicolons(lines: Iterable[str]) -> list[Bug]:
    """Report missing and doubled semicolons."""
    bugs: list[Bug] = []
    in_struct = False
    for line_number, raw in enumerate(lines, start=1):
        if _is_skipped(raw):
            continue
        if "struct" in raw and "{" in raw:
            in_struct = True
        if "}" in raw and in_struct:
            in_struct = False
        line = raw.rstrip(_C_SPACE)
        if not line:
            continue

        if _should_end_with_semicolon(line) and not in_struct and not line.endswith(";"):
            bugs.append(Bug(
                "Missing Semicolon", line_number,
                f"Missing semicolon at the end of line {line_number}",
            ))
        if "for" in line and ";" not in line:
            bugs.append(Bug(
                "Missing Semicolon", line_number,
                f"Missing semicolon in for loop at line {line_number}",
            ))
        for _ in range(_extra_semicolon_count(line)):
            bugs.append(Bug(
                "Extra Semicolon", line_number, f"Extra semicolon at line {line_number}",
            ))
    return bugs


def check_division_by_zero(lines: Iterable[str]) -> list[Bug]:
    """Report lines that appear to divide or take a remainder by zero."""
    return [
        Bug("Division by Zero", line_number, f"Division by zero at line {line_number}")
        for line_number, line in enumerate(lines, start=1)
        if any(pattern in line for pattern in _ZERO_DIVISIONS)
    ]


def check_unsafe_calls(lines: Iterable[str]) -> list[Bug]:
    """Report unsafe library calls and allocation calls without arguments."""
    bugs: list[Bug] = []
    for line_number, line in enumerate(lines, start=1):
        if "gets" in line:
            bugs.append(Bug(
                "unsafe option", line_number,
                f"Unsafe option of using gets Instead use fgets at line: {line_number}",
            ))
        if any(call in line for call in _UNSAFE_STRING_CALLS):
            if not all(call in line for call in _BOUNDED_STRING_CALLS):
                bugs.append(Bug(
                    "Buffer Overflow", line_number,
                    "Buffer overflow: Unsafe String operation without bounds checking",
                ))
            if _lacks_parentheses(line):
                bugs.append(Bug(
                    "Missing Arguments", line_number,
                    f"Missing arguments for strcpy or strcat at line {line_number}",
                ))
        for call in _CALLS_NEEDING_ARGUMENTS:
            if call in line and _lacks_parentheses(line):
                bugs.append(Bug(
                    f"{call} error", line_number,
                    f"No reference for {call} at line {line_number}",
                ))
    return bugs


def _assigned_name(line: str) -> str | None:
    """Return the identifier directly left of the first ``=``, if any."""
    equals = line.find("=")
    if equals == -1:
        return None
    name_end = equals - 1
    while name_end >= 0 and line[name_end] in _C_SPACE:
        name_end -= 1
    name_start = name_end
    while name_start >= 0 and _is_word_char(line[name_start]):
        name_start -= 1
    name_start += 1
    if name_start >= equals:
        return None
    name_len = name_end - name_start + 1
    if name_len <= 0 or name_len >= MAX_NAME_LENGTH:
        return None
    return line[name_start:name_end + 1]


def _is_whole_word_at(line: str, pos: int, length: int) -> bool:
    before = line[pos - 1] if pos > 0 else ""
    after = line[pos + length:pos + length + 1]
    return not _is_word_char(before) and not _is_word_char(after)


def check_uninitialized(lines: Iterable[str]) -> list[Bug]:
    """Report variables that are read before any value is assigned to them."""
    bugs: list[Bug] = []
    tracker = VariableTracker()
    for line_number, raw in enumerate(lines, start=1):
        if _is_skipped(raw):
            continue
        line = raw.rstrip(_C_SPACE)
        if not line:
            continue

        declaration = is_variable_declaration(line)
        if declaration:
            name = extract_variable_from_declaration(line)
            var_type = extract_variable_type(line)
            if name is not None and var_type is not None:
                existing = tracker.find(name)
                if existing is None:
                    tracker.add(name, var_type, line_number, is_initialized(line))
                else:
                    existing.declaration_line = line_number
                    existing.is_initialized = is_initialized(line)

        assigned = _assigned_name(line)
        if assigned is not None:
            var = tracker.find(assigned)
            if var is not None:
                var.is_initialized = True

        for var in tracker:
            if var.declaration_line > line_number or var.is_initialized:
                continue
            pos = line.find(var.name)
            if pos == -1 or not _is_whole_word_at(line, pos, len(var.name)):
                continue
            if not declaration and "=" not in line:
                bugs.append(Bug(
                    "Uninitialized Variable", line_number,
                    f"Variable '{var.name}' used before initialization at line {line_number}",
                ))
    return bugs


def analyse_lines(lines: Iterable[str]) -> list[Bug]:
    """Run every check over ``lines`` and return the bugs in check order."""
    source = list(lines)
    return [
        *check_brackets(source),
        *check_semicolons(source),
        *check_division_by_zero(source),
        *check_unsafe_calls(source),
        *check_uninitialized(source),
    ]


def analyse_code(path) -> list[Bug]:
    """Analyse the C source file at ``path``."""
    return analyse_lines(_read_lines(path))


def format_bugs(bugs: Iterable[Bug]) -> str:
    """Render a bug report."""
    entries = list(bugs)
    if not entries:
        return "No tokens found.\n"
    parts = ["Bug Detected:\n"]
    for bug in entries:
        parts.append(
            f"Token Type: {bug.type}\nLine Number: {bug.line}\nDescription: {bug.description}\n\n"
        )
    return "".join(parts)


def main(argv=None) -> int:
    """Analyse a C source file and print bug, variable, function and recursion reports."""
    parser = argparse.ArgumentParser(
        prog="cbugscan", description="Find common bugs in a C source file."
    )
    parser.add_argument("source", nargs="?", default=DEFAULT_SOURCE, help="C file to analyse")
    args = parser.parse_args(argv)
    source = args.source

    print("====Bug-Detection in C using C====")
    try:
        bugs = analyse_code(source)
        variables = extract_all_variables(source)
        functions = extract_all_functions(source)
        recursion_report = detect_infinite_recursion(source)
    except OSError as exc:
        print(f"Error opening file: {source} ({exc.strerror or exc})", file=sys.stderr)
        return 1

    print(format_bugs(bugs), end="")
    print(f"Report for Variables and Functions in {source}\n")

    for message in variables.diagnostics:
        print(message)
    print(f"Extracting variables from {source}...")
    print(format_variables(variables), end="")

    print(f"Extracting functions from {source}...")
    print(format_functions(functions), end="")

    print("Infinite Recurssions found: \n")
    print(recursion_report)
    return 0


if __name__ == "__main__":
    sys.exit(main())