[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xfpl"
version = "0.2.0"
description = "Fantasy football toolkit: captain ranking, player lookup, gameweek points joins and JSON output shaping"
requires-python = ">=3.10"
dependencies = []
keywords = ["fantasy football", "fpl", "captain", "gameweek", "json"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["xfpl"]

[tool.pytest.ini_options]
addopts = "-ra"
