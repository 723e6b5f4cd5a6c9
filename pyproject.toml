[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ministore"
version = "0.1.0"
description = "Storage engine building blocks: LRU buffer pool, index root pages, B+ tree index and catalog metadata layouts"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "storage", "b-plus-tree", "buffer-pool", "index", "lru"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ministore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
