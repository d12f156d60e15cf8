[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "exptran"
version = "0.1.0"
description = "Multilinear face model, expression transfer helpers and image utilities"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["face", "tensor", "multilinear", "svd", "expression transfer", "poisson", "image processing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Image Processing",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["exptran"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
