[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ciexporter"
version = "0.1.0"
description = "Data model, state stores and rate limiting for a CI pipelines metrics exporter"
requires-python = ">=3.10"
keywords = ["ci", "pipelines", "metrics", "exporter", "monitoring", "redis", "rate-limit"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]
dependencies = [
    "redis>=4.5",
    "msgpack>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[tool.hatch.build.targets.wheel]
packages = ["ciexporter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
