[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "matchbook"
version = "0.1.0"
description = "Building blocks of an electronic exchange: wire messages, queues, logging, sockets, order gateway and multicast market data publishing"
requires-python = ">=3.10"
keywords = ["exchange", "order-gateway", "market-data", "trading", "multicast", "fifo-sequencer"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
    "Topic :: System :: Networking",
]
dependencies = [
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["matchbook"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
