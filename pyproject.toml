[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "blconf"
version = "0.1.0"
description = "Channel-based configuration store client with typed properties, arrays and structs"
requires-python = ">=3.10"
dependencies = []
keywords = ["configuration", "settings", "channel", "properties", "desktop"]
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
    "Topic :: Desktop Environment",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["blconf"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
