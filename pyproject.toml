[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "servermon"
version = "0.1.0"
description = "Desktop monitor that pings servers and checks which of their TCP ports are open"
requires-python = ">=3.10"
dependencies = []
keywords = ["monitoring", "ping", "icmp", "port-check", "tcp", "servers", "tkinter"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: X11 Applications",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
servermon = "servermon.gui:main"

[tool.hatch.build.targets.wheel]
packages = ["servermon"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
