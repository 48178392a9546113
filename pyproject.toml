[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "plistkit"
version = "0.1.0"
description = "Property list trees with XML reading and writing"
requires-python = ">=3.10"
dependencies = []
keywords = ["plist", "property list", "xml", "serialization"]
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
    "Topic :: File Formats",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["plistkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
