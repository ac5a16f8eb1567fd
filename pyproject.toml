[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "appcfg"
version = "1.0.3"
description = "Unix style command line option and configuration file parsing"
requires-python = ">=3.10"
dependencies = []
keywords = ["getopt", "command line", "options", "configuration", "config file"]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["appcfg"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
