# cbugscan

A small, line-based heuristic scanner that looks for common mistakes in C
source files. It does not parse C. It reads the file line by line and applies
simple text rules, so expect false positives and missed cases.

## What it reports

- **Bracket errors**: unexpected, mismatched or unclosed `()`, `{}` and `[]`.
- **Semicolons**: statements that look like they are missing a trailing `;`,
  `for` lines without any `;`, and repeated `;;` outside string literals.
- **Division by zero**: literal patterns such as `/0`, `/ 0`, `%0` and `% 0`.
- **Unsafe calls**: any use of `gets`, `strcpy`/`strcat`/`strcmp` without
  bounds checking, and `free`/`malloc`/`calloc`/`realloc`/`exit` on a line
  without parentheses.
- **Uninitialized variables**: declared names that are used before any value
  is assigned to them.
- **Memory tracking**: double frees, frees of untracked variables and uses of
  a pointer after it has been freed.
- **Functions**: the name and first line of each function that is detected.
- **Infinite recursion**: the first call that closes a cycle in the call graph.

## Installation

```
pip install .
```

## Command line

```
cbugscan path/to/file.c
```

The command prints the bug report, the memory diagnostics, the variables and
functions it found, and the result of the recursion check. With no argument it
reads `testcase.txt` from the current directory. If the file cannot be opened
it prints an error to standard error and exits with status 1.

## Library use

Each module works on a file path or on lines already in memory.

```python
from cbugscan.analyzer import analyse_code, format_bugs
from cbugscan.variables import extract_all_variables, format_variables
from cbugscan.functions import extract_all_functions, format_functions
from cbugscan.recursion import detect_infinite_recursion

bugs = analyse_code("example.c")          # list of Bug(type, line, description)
print(format_bugs(bugs), end="")

variables = extract_all_variables("example.c")   # a VariableTracker
for message in variables.diagnostics:            # double free, use after free
    print(message)
print(format_variables(variables), end="")

print(format_functions(extract_all_functions("example.c")), end="")

print(detect_infinite_recursion("example.c"))    # one-line report
```

The line-level helpers take any iterable of lines:

```python
from cbugscan.analyzer import analyse_lines, check_brackets
from cbugscan.recursion import find_infinite_recursion
from cbugscan.variables import scan_variables
from cbugscan.functions import scan_functions

source = "void f() {\n    f();\n}\n".splitlines(keepends=True)

print(analyse_lines(source))
print(check_brackets(source))
print(scan_functions(source))           # [FunctionInfo(name, start_line, end_line)]

cycle = find_infinite_recursion(source)  # RecursionCycle or None
if cycle is not None:
    print(cycle.caller, cycle.callee, cycle.line)
    print(cycle.message)

tracker = scan_variables(["int *p = malloc(4);\n", "free(p);\n", "free(p);\n"])
print(tracker.diagnostics)
```

`cbugscan.recursion.CallGraph` can also be built by hand with `add_function`
and `add_call`, and searched with `find_cycle`.

## What it does not do

- It does not parse or compile C, follow `#include` files or expand macros.
- It does not fix anything; it only reports.
- It has no configuration: the rules and keyword lists are fixed.

## Running the tests

```
pip install .[test]
pytest
```