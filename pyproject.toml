[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "acecose"
version = "0.2.0"
description = "Bounded CBOR encoding and in-place decoding, and COSE Encrypt0 objects with AES-CCM, for ACE authorization"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["cbor", "cose", "ace", "oauth", "aes-ccm", "encrypt0", "iot"]
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
    "Topic :: Security :: Cryptography",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["acecose"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
