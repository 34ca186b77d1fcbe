[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cupi"
version = "0.1.0"
description = "Client library for Cisco Unity Connection administration over the CUPI REST interface and the DIME log collection service"
requires-python = ">=3.10"
dependencies = [
    "requests",
]
keywords = ["unity connection", "voicemail", "cupi", "telephony", "administration"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Telephony",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["cupi"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
