[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "b3history"
version = "0.1.0"
description = "Load B3 trade history files into an SQLite database and query per-ticker summaries."
requires-python = ">=3.10"
dependencies = []
keywords = ["b3", "trades", "stock-exchange", "csv", "market-data", "sqlite", "etl"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Financial and Insurance Industry",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Office/Business :: Financial :: Investment",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
b3-processor = "b3history.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["b3history"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
