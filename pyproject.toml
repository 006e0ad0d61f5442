[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hdfslite"
version = "0.1.0"
description = "HDFS client library and command-line tool with an os-like interface"
requires-python = ">=3.10"
dependencies = []
keywords = ["hdfs", "hadoop", "filesystem", "namenode", "datanode"]
classifiers = [
    "Development Status :: 3 - Alpha",
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
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
hdfslite = "hdfslite.cli.main:main"

[tool.hatch.build.targets.wheel]
packages = ["hdfslite"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
