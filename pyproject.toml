[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "challengekit"
version = "0.1.0"
description = "Challenge registry, dependency ordering, plugins, reports and Panoptic UI-testing integration for challenge-based test suites"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = [
    "testing",
    "challenges",
    "reporting",
    "ui-testing",
    "plugins",
    "dependency-graph",
]
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
    "Topic :: Software Development :: Testing",
    "Topic :: Software Development :: Quality Assurance",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["challengekit"]

[tool.hatch.build.targets.sdist]
include = [
    "challengekit",
    "tests",
    "README.md",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
