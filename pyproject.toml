[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "wallmapper"
version = "0.1.0"
description = "Grid-based video wall mapping: cell mappings, GPU uniform packing and marker-driven display quads"
requires-python = ">=3.10"
dependencies = []
keywords = ["projection-mapping", "video-wall", "video-matrix", "calibration", "uniforms"]
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
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["wallmapper*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
