[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "shipmates"
version = "0.1.0"
description = "A small multiplayer top-down game with a websocket server that shares player positions"
requires-python = ">=3.10"
keywords = ["game", "multiplayer", "websocket", "pygame"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment :: Simulation",
]
dependencies = [
    "pygame",
    "websockets",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
shipmates = "shipmates.app:main"
shipmates-server = "shipmates.server:main"

[tool.hatch.build.targets.wheel]
packages = ["shipmates"]

[tool.pytest.ini_options]
addopts = "-ra"
