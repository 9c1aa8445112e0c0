[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jetdb"
version = "0.1.0"
description = "Building blocks for Jet (Access) database files: row layouts, pages, search conditions, money values, RC4 and connection strings"
requires-python = ">=3.10"
dependencies = []
keywords = ["jet", "access", "mdb", "database", "rc4", "row-format", "odbc"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["jetdb"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
