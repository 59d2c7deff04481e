[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minicmips"
version = "0.1.0"
description = "Abstract syntax tree, scoped symbol table and MIPS assembly generator for a small C-like language"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "mips", "code generation", "symbol table", "abstract syntax tree"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["minicmips"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
