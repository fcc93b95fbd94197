import pytest

from cbugscan.variables import (
    VariableTracker,
    extract_all_variables,
    extract_variable_from_allocation,
    extract_variable_from_declaration,
    extract_variable_from_free,
    extract_variable_type,
    format_variables,
    is_initialized,
    is_variable_declaration,
    scan_variables,
)

SAMPLE = [
    "int main() {\n",
    "    int *ptr = malloc(4);\n",
    "    free(ptr);\n",
    "    free(ptr);\n",
    "    ptr->x = 1;\n",
    "}\n",
]


@pytest.mark.parametrize(
    "line, expected",
    [
        ("int count = 5;\n", "count"),
        ("    char *name;\n", "*name"),
        ("int values[10];\n", "values"),
        ("int main() {\n", "main"),
        ("double total ;\n", "total"),
    ],
)
def test_declaration_names(line, expected):
    assert extract_variable_from_declaration(line) == expected


@pytest.mark.parametrize("line", ["", "   \n", "int ;\n", "int x", "int =1;\n"])
def test_declaration_without_name(line):
    assert extract_variable_from_declaration(line) is None


def test_declaration_name_too_long():
    assert extract_variable_from_declaration("int " + "a" * 60 + ";\n") is None


@pytest.mark.parametrize(
    "line, expected",
    [("  int x;", "int"), ("char* p;", "char"), ("struct node *n;", "struct")],
)
def test_variable_type(line, expected):
    assert extract_variable_type(line) == expected


@pytest.mark.parametrize("line", ["", "   ", "*p = 1;", "a" * 25 + " x;"])
def test_variable_type_rejected(line):
    assert extract_variable_type(line) is None


def test_allocation_name():
    assert extract_variable_from_allocation("    int *ptr = malloc(10);\n") == "ptr"
    assert extract_variable_from_allocation("    buf=calloc(1, 2);\n") == "buf"


def test_allocation_without_assignment():
    assert extract_variable_from_allocation("    malloc(10);\n") is None
    assert extract_variable_from_allocation("= malloc(10);\n") is None


def test_free_name():
    assert extract_variable_from_free("    free( ptr );\n") == "ptr"
    assert extract_variable_from_free("free(data);") == "data"


@pytest.mark.parametrize("line", ["free();", "free(ptr", "release(ptr);"])
def test_free_name_missing(line):
    assert extract_variable_from_free(line) is None


def test_declaration_and_initialisation_checks():
    assert is_variable_declaration("    long total;")
    assert is_variable_declaration("struct node *n;")
    assert not is_variable_declaration("    total += 1;")
    assert is_initialized("x = 1;")
    assert not is_initialized("int x;")


def test_double_free_is_reported():
    tracker = VariableTracker()
    tracker.record_allocation("p", 1)
    assert tracker.mark_freed("p", 2) == []
    messages = tracker.mark_freed("p", 3)
    assert messages == [
        "Error: Double free detected for variable 'p' at line 3 (previously freed at line 2)."
    ]
    assert tracker.find("p").freed_line == 2
    assert tracker.diagnostics == messages


def test_free_of_untracked_variable():
    tracker = VariableTracker()
    messages = tracker.mark_freed("ghost", 7)
    assert messages == ["Warning: Attempt to free untracked variable 'ghost' at line 7."]
    assert len(tracker) == 0


def test_free_of_non_pointer_is_ignored():
    tracker = VariableTracker()
    tracker.add("x", "int", 1, True)
    assert tracker.mark_freed("x", 2) == []
    assert tracker.find("x").is_freed is False


def test_reallocation_clears_freed_state():
    tracker = VariableTracker()
    tracker.add("p", "int", 1, False)
    tracker.record_allocation("p", 2)
    tracker.mark_freed("p", 3)
    var = tracker.record_allocation("p", 4)
    assert (var.type, var.is_initialized, var.is_freed, var.freed_line) == (
        "pointer", True, False, 0,
    )
    assert len(tracker) == 1


def test_use_after_free_dereference_and_token():
    tracker = VariableTracker()
    tracker.record_allocation("p", 1)
    tracker.mark_freed("p", 2)
    messages = tracker.check_use_after_free("    x = *p;\n", 3)
    assert len(messages) == 2
    assert "dereferenced at line 3" in messages[0]
    assert "used as a token at line 3" in messages[1]


def test_use_after_free_ignores_free_call_and_longer_names():
    tracker = VariableTracker()
    tracker.record_allocation("p", 1)
    tracker.mark_freed("p", 2)
    assert tracker.check_use_after_free("    free(p);\n", 3) == []
    assert tracker.check_use_after_free("    x = *pp;\n", 4) == []
    assert tracker.diagnostics == []


def test_scan_variables_end_to_end():
    tracker = scan_variables(SAMPLE)
    assert [var.name for var in tracker] == ["main", "*ptr", "ptr"]
    ptr = tracker.find("ptr")
    assert ptr.type == "pointer"
    assert ptr.is_freed
    assert tracker.diagnostics[0] == (
        "Error: Double free detected for variable 'ptr' at line 4 (previously freed at line 3)."
    )
    assert "'->' operator at line 5" in tracker.diagnostics[1]
    assert "used as a token at line 5" in tracker.diagnostics[2]
    assert len(tracker.diagnostics) == 3


def test_extract_all_variables_matches_scan(tmp_path):
    source = tmp_path / "sample.c"
    source.write_text("".join(SAMPLE))
    from_file = extract_all_variables(source)
    from_lines = scan_variables(SAMPLE)
    assert list(from_file) == list(from_lines)
    assert from_file.diagnostics == from_lines.diagnostics


def test_extract_all_variables_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        extract_all_variables(tmp_path / "absent.c")


def test_format_variables():
    assert format_variables([]) == "No variables found.\n"
    tracker = VariableTracker()
    tracker.add("count", "int", 4, True)
    assert format_variables(tracker) == (
        "Variables Detected:\n\n"
        "Name: count\nType: int\nLine: 4\tInitialised: Yes\tfreed: No\n\n"
    )