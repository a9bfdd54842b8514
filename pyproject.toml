[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "urcf"
version = "0.1.0"
description = "Engine services: semantic versions, configuration trees, plugin manifests, iptables control, process watching and log forwarding"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["semver", "iptables", "configuration", "plugins", "watchdog", "services"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["urcf"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
