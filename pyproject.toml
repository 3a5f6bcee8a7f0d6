[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "depthbook"
version = "0.1.0"
description = "Price-level aggregated market depth for limit order books"
requires-python = ">=3.10"
dependencies = []
keywords = ["order book", "market depth", "trading", "limit orders", "bbo"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["depthbook"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
