[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lndw"
version = "0.1.0"
description = "A small teaching compiler for arithmetic expressions, with optimisation passes and a register-machine interpreter"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "interpreter", "education", "optimisation", "register allocation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
lndw = "lndw.app:main"

[tool.hatch.build.targets.wheel]
packages = ["lndw"]

[tool.pytest.ini_options]
addopts = "-ra"
