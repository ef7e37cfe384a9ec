[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "segos"
version = "0.1.0"
description = "A small teaching operating system: segmented CPU, block file system and FIFO/HRRN kernel scheduler"
requires-python = ">=3.10"
dependencies = []
keywords = ["operating-system", "scheduler", "hrrn", "segmentation", "file-system", "simulation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["segos"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
