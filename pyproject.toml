[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "coserve"
version = "1.0.0"
description = "A small asynchronous keep-alive HTTP/1.1 server with an incremental request parser"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "asyncio", "keep-alive", "parser"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[project.scripts]
coserve = "coserve.server:main"

[tool.hatch.build.targets.wheel]
packages = ["coserve"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
