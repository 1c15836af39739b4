[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "arbiter"
version = "0.4.13"
description = "Command-line tooling for EVM simulation projects: project scaffolding, contract bindings and state forking"
requires-python = ">=3.11"
keywords = ["ethereum", "evm", "simulation", "forge", "bindings", "fork"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "requests",
    "pycryptodome",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
arbiter = "arbiter.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["arbiter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
