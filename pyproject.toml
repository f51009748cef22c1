[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ckpool"
version = "1.0.0"
description = "Mining pool support library: hashing, difficulty math, encodings, locks and TCP socket helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["bitcoin", "mining", "stratum", "sha256", "difficulty", "base58", "bech32"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ckpool"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
