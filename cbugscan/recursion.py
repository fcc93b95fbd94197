"""Call-graph construction and detection of unbounded recursion in C sources."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

NO_RECURSION_MESSAGE = "✅ No infinite recursion detected."

_LINE_LIMIT = 255
_C_SPACE = " \t\n\v\f\r"
_DEFINITION_KEYWORDS = ("void", "int", "float", "double", "char")


def _read_lines(path: str | Path) -> Iterator[str]:
    """Yield the lines of a file in chunks of at most 255 characters."""
    with open(path, encoding="utf-8", errors="replace") as handle:
        for raw in handle:
            while len(raw) > _LINE_LIMIT:
                yield raw[:_LINE_LIMIT]
                raw = raw[_LINE_LIMIT:]
            yield raw


def _definition_name(line: str) -> str | None:
    """Return the name of a definition starting with a basic type keyword, if any.

    The line must begin with the keyword itself; any whitespace after it is
    skipped and the name runs up to the first parenthesis or the line's end.
    """
    for keyword in _DEFINITION_KEYWORDS:
        if not line.startswith(keyword):
            continue
        rest = line[len(keyword):].lstrip(_C_SPACE)
        end = len(rest)
        for paren in "()":
            found = rest.find(paren)
            if found != -1:
                end = min(end, found)
        if end > 0:
            return rest[:end]
    return None


@dataclass(frozen=True)
class CallEdge:
    """A call from ``caller`` to ``callee`` on source line ``line``."""

    caller: str
    callee: str
    line: int


@dataclass(frozen=True)
class RecursionCycle:
    """The call that closes a cycle in the call graph."""

    caller: str
    callee: str
    line: int

    @property
    def message(self) -> str:
        return (
            f"⚠️ Infinite recursion detected: Function '{self.caller}' calling function "
            f"'{self.callee}' on line {self.line} forms a cycle."
        )

    def __str__(self) -> str:
        return self.message


class CallGraph:
    """Functions in registration order and the calls between them."""

    def __init__(self):
        self.functions: list[str] = []
        self.edges: list[CallEdge] = []
        self._index: dict[str, int] = {}
        self._outgoing: dict[str, list[CallEdge]] = {}

    def add_function(self, name) -> int:
        """Register ``name`` if new and return its index."""
        index = self._index.get(name)
        if index is None:
            index = len(self.functions)
            self._index[name] = index
            self.functions.append(name)
            self._outgoing[name] = []
        return index

    def add_call(self, caller, callee, line) -> CallEdge:
        """Record that ``caller`` calls ``callee`` on ``line``."""
        self.add_function(caller)
        self.add_function(callee)
        edge = CallEdge(caller, callee, line)
        self.edges.append(edge)
        self._outgoing[caller].append(edge)
        return edge

    def _search_from(self, root: str) -> RecursionCycle | None:
        visited = {root}
        on_stack = {root}
        # Calls are explored most recent first.
        stack = [(root, iter(reversed(self._outgoing[root])))]
        while stack:
            node, pending = stack[-1]
            for edge in pending:
                if edge.callee not in visited:
                    visited.add(edge.callee)
                    on_stack.add(edge.callee)
                    stack.append((edge.callee, iter(reversed(self._outgoing[edge.callee]))))
                    break
                if edge.callee in on_stack:
                    return RecursionCycle(edge.caller, edge.callee, edge.line)
            else:
                on_stack.discard(node)
                stack.pop()
        return None

    def find_cycle(self) -> RecursionCycle | None:
        """Return the first call closing a cycle, searching from each function in order."""
        for name in self.functions:
            cycle = self._search_from(name)
            if cycle is not None:
                return cycle
        return None


def build_call_graph(lines: Iterable[str]) -> CallGraph:
    """Build a call graph from C source ``lines``."""
    graph = CallGraph()
    current = ""
    for line_number, line in enumerate(lines, start=1):
        if line.startswith("//"):
            continue
        name = _definition_name(line)
        if name is not None:
            current = name
            graph.add_function(name)
        if not current:
            continue
        for callee in list(graph.functions):
            if f"{callee}(" in line:
                graph.add_call(current, callee, line_number)
    return graph


def find_infinite_recursion(lines: Iterable[str]) -> RecursionCycle | None:
    """Return the first recursion cycle found in ``lines``, or None."""
    return build_call_graph(lines).find_cycle()


def detect_infinite_recursion(path) -> str:
    """Scan the file at ``path`` and return a one-line recursion report."""
    cycle = find_infinite_recursion(_read_lines(path))
    return NO_RECURSION_MESSAGE if cycle is None else cycle.message