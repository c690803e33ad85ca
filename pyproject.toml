[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "agent-parallel"
version = "0.0.1"
description = "Task orchestration for parallel agents: a DAG task scheduler, MCP tool configuration management and task notifications"
requires-python = ">=3.10"
dependencies = []
keywords = ["agents", "dag", "orchestration", "mcp", "tasks", "scheduler"]
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
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["agent_parallel"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
