[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "spacekit"
version = "1.1.6"
description = "Tree-view building blocks for disk space views, plus build tooling for coverage, benchmarks and Git-based version calculation"
requires-python = ">=3.10"
keywords = ["disk", "space", "usage", "version", "semver", "coverage", "benchmark"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Topic :: Software Development :: Build Tools",
    "Topic :: Utilities",
]
dependencies = [
    "semver>=3.0",
    "tomlkit>=0.11",
    "tqdm>=4.60",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
buildit = "spacekit.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["spacekit"]

[tool.hatch.build.targets.sdist]
include = ["spacekit", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
