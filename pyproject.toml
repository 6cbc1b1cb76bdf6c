[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ntaglib"
version = "0.1.0"
description = "Neutron tagging helpers: statistics, option parsing, settings store, vertex fitting, software trigger emulation and PMT noise handling."
requires-python = ">=3.10"
dependencies = []
keywords = ["physics", "neutron tagging", "water Cherenkov", "PMT", "vertex fit", "trigger"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ntaglib"]

[tool.pytest.ini_options]
addopts = "-ra"
