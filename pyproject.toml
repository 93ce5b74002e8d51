[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lumonos"
version = "0.1.0"
description = "A small user environment: a pipeline shell, core utilities and uniform I/O objects over an in-memory file system and process model"
requires-python = ">=3.10"
dependencies = []
keywords = ["shell", "uio", "printf", "pipeline", "coreutils", "simulation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
lumonos = "lumonos.shell:main"

[tool.hatch.build.targets.wheel]
packages = ["lumonos"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
