[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chatbye"
version = "0.1.0"
description = "Local-network chat client core: server discovery, port scanning, framed messaging and chat text formatting"
requires-python = ">=3.10"
keywords = ["chat", "lan", "discovery", "multicast", "tcp"]
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
    "Topic :: Communications :: Chat",
]
dependencies = [
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["chatbye"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
