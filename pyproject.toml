[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oa3kit"
version = "0.1.0"
description = "Load, resolve and check OpenAPI 3 documents, with naming and typing helpers for Go code generation"
requires-python = ">=3.10"
keywords = ["openapi", "openapi3", "code-generation", "go", "schema", "validation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Code Generators",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["oa3kit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
