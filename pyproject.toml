[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "httpreqkit"
version = "0.1.0"
description = "Helpers for HTTP request resources: jq-style queries, JSON utilities, secret placeholders and status bookkeeping."
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "jq", "json", "secrets", "placeholders", "status"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["httpreqkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
