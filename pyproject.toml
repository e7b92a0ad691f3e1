[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "songrec"
version = "0.1.0"
description = "Song rankings by Bayesian average and user-based song recommendations from a ratings CSV"
requires-python = ">=3.10"
dependencies = []
keywords = ["recommendation", "b-tree", "bayesian-average", "pearson", "ratings", "collaborative-filtering"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Information Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
songrec = "songrec.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["songrec"]

[tool.pytest.ini_options]
addopts = "-ra"
