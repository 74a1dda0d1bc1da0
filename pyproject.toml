[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "partkit"
version = "0.1.0"
description = "In-memory model of disks, partitions and volumes with MBR/GPT layout handling and select, setid and uniqueid commands"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "partition",
    "mbr",
    "gpt",
    "guid",
    "disk",
    "volume",
    "partition-table",
]
classifiers = [
    "Development Status :: 3 - Alpha",
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

[tool.hatch.build.targets.wheel]
packages = ["partkit"]

[tool.hatch.build.targets.sdist]
include = ["partkit", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
