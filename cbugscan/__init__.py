"""Heuristic, line-based bug scanner for C source files: brackets, semicolons,
unsafe calls, uninitialized and freed variables, functions and recursion."""

__version__ = "0.1.0"
__all__ = ["analyzer", "functions", "recursion", "variables"]