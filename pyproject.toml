[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tcpchat"
version = "0.1.0"
description = "Small TCP servers and a client: a poll-based and a select-based chat server, a one-shot reply server and a matching client."
requires-python = ">=3.10"
dependencies = []
keywords = ["tcp", "socket", "chat", "poll", "select", "server", "client"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tcpchat-poll-server = "tcpchat.poll_server:main"
tcpchat-select-server = "tcpchat.select_server:main"
tcpchat-basic-server = "tcpchat.basic_server:main"
tcpchat-client = "tcpchat.client:main"

[tool.hatch.build.targets.wheel]
packages = ["tcpchat"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
