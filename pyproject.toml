[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nodoplugins"
version = "0.1.0"
description = "Command parsing, RF signal decoding and control logic for Nodo home-automation plugins"
requires-python = ">=3.10"
dependencies = []
keywords = ["nodo", "home-automation", "rf", "kaku", "alecto", "oregon", "pid", "wiegand"]
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
    "Topic :: Home Automation",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nodoplugins"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
