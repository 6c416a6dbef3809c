[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oscwire"
version = "0.1.0"
description = "Open Sound Control 1.0 messages, bundles, client and server over UDP"
requires-python = ">=3.10"
dependencies = []
keywords = ["osc", "open sound control", "udp", "audio", "music", "networking"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio",
    "Topic :: System :: Networking",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
oscwire-debug-server = "oscwire.debugserver:main"
oscwire-send = "oscwire.sender:main"

[tool.hatch.build.targets.wheel]
packages = ["oscwire"]

[tool.pytest.ini_options]
addopts = "-ra"
