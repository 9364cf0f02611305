[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "runcfg"
version = "0.3.0"
description = "Load Cloud Run service, job and instance metadata configuration, and format logs for Cloud Logging"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "cloud-run",
    "configuration",
    "environment",
    "metadata",
    "logging",
    "serverless",
]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: System :: Logging",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["runcfg"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
