import pytest

from cbugscan.functions import (
    FunctionInfo,
    extract_all_functions,
    extract_function,
    format_functions,
    scan_functions,
)

SAMPLE = [
    "int add(int a, int b) {\n",
    "    return a + b;\n",
    "}\n",
    "\n",
    "void greet(void) {\n",
    '    printf("hi\\n");\n',
    "}\n",
]


@pytest.mark.parametrize(
    "line, expected",
    [
        ("int main() {", "main"),
        ("void  foo (int a)", "foo"),
        ("static int helper_2(void);", "helper_2"),
    ],
)
def test_extract_function(line, expected):
    assert extract_function(line) == expected


@pytest.mark.parametrize("line", ["(x)", "  (x)", "no parens here", "x)(y"])
def test_extract_function_without_name(line):
    assert extract_function(line) is None


def test_extract_function_name_too_long():
    assert extract_function("void " + "f" * 60 + "(void)") is None


def test_scan_functions_ranges():
    functions = scan_functions(SAMPLE)
    assert [func.name for func in functions] == ["add", "greet"]
    assert [func.start_line for func in functions] == [1, 5]
    for func in functions:
        assert SAMPLE[func.start_line - 1].startswith(("int", "void"))
        assert SAMPLE[func.end_line - 1] == "}\n"
        assert func.start_line < func.end_line


def test_unterminated_function_ends_at_last_line():
    lines = ["int main() {\n", "    work();\n", "    more();\n"]
    functions = scan_functions(lines)
    assert [func.name for func in functions] == ["main"]
    assert functions[0].end_line == len(lines)


@pytest.mark.parametrize(
    "lines",
    [
        ["int x = f(1);\n"],
        ["if (x) {\n", "}\n"],
        ["#include <stdio.h>\n"],
        ["int y;\n"],
        [],
    ],
)
def test_lines_that_are_not_definitions(lines):
    assert scan_functions(lines) == []


def test_extract_all_functions_matches_scan(tmp_path):
    source = tmp_path / "sample.c"
    source.write_text("".join(SAMPLE))
    assert extract_all_functions(source) == scan_functions(SAMPLE)


def test_extract_all_functions_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        extract_all_functions(tmp_path / "absent.c")


def test_format_functions():
    assert format_functions([]) == "No functions found!\n"
    report = format_functions([FunctionInfo("add", 1, 3), FunctionInfo("greet", 5, 7)])
    assert report == (
        "\n===== FUNCTIONS DETECTED =====\n\n"
        "Function #1: add\tFrom line: 1\n\n"
        "Function #2: greet\tFrom line: 5\n\n"
    )