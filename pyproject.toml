[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cbugscan"
version = "0.1.0"
description = "Line-based heuristic bug scanner for C source files"
requires-python = ">=3.10"
dependencies = []
keywords = ["c", "static-analysis", "lint", "bugs", "memory", "recursion"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Programming Language :: C",
    "Topic :: Software Development :: Quality Assurance",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
cbugscan = "cbugscan.analyzer:main"

[tool.hatch.build.targets.wheel]
packages = ["cbugscan"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
