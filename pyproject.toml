[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "palm"
version = "1.5.1"
description = "A library for AI command-line tools: workflows, answer evaluation, code audits, benchmarks, pipelines and project context"
requires-python = ">=3.11"
dependencies = []
keywords = [
    "ai",
    "llm",
    "workflow",
    "benchmark",
    "code-audit",
    "developer-tools",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
    "Topic :: Utilities",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["palm"]

[tool.hatch.build.targets.sdist]
include = ["palm", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
