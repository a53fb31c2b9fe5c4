[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bqdrift"
version = "0.1.0"
description = "BigQuery helpers: structured error classification, SQL table dependency extraction, YAML file includes and version references"
requires-python = ">=3.10"
keywords = ["bigquery", "sql", "schema", "yaml", "dependencies", "errors"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Database :: Front-Ends",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bqdrift"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
