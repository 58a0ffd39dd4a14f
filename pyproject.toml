[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "backplane-upgrade"
version = "0.1.0"
description = "Self-upgrading command-line tool for the backplane plugin, with helpers for building managed-script test jobs"
requires-python = ">=3.10"
keywords = ["backplane", "upgrade", "release", "cli", "managed-scripts"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]
dependencies = [
    "requests>=2.28",
    "semver>=3.0",
    "pyyaml>=6.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
ocm-backplane = "backplane_upgrade.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["backplane_upgrade"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
