[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "policyreasoner"
version = "0.1.0"
description = "Building blocks for a policy reasoner: policy storage, audit logging, state resolution, POSIX permission checks and eFLINT phrase building"
requires-python = ">=3.10"
keywords = ["policy", "reasoner", "audit", "eflint", "posix", "permissions", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Typing :: Typed",
]
dependencies = []

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["policyreasoner"]

[tool.hatch.build.targets.sdist]
include = ["policyreasoner", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
