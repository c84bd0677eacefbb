[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "harnex"
version = "0.1.0"
description = "Deterministic validators and a closed-schema telemetry ledger for Claude Code project harnesses."
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
    "filelock",
]
keywords = ["claude-code", "validation", "frontmatter", "telemetry", "jsonl", "commit-msg"]
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
    "Topic :: Software Development :: Quality Assurance",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["harnex"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
