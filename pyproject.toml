[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hollywood"
version = "0.1.0"
description = "A lightweight actor engine with supervised processes, an event stream, request/response and cluster membership primitives."
requires-python = ">=3.10"
dependencies = []
keywords = ["actor", "actors", "concurrency", "message-passing", "cluster", "supervision"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hollywood"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
