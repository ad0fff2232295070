[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "clawlite"
version = "0.1.0"
description = "Runtime core for a chat assistant: goal tracking, session state, health counters, tool-loop orchestration and reply helpers."
requires-python = ">=3.10"
dependencies = []
keywords = ["chatbot", "assistant", "agent", "goals", "sessions", "orchestration"]
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

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["clawlite"]

[tool.pytest.ini_options]
addopts = "-ra"
