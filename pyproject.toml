[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "nemsolve"
version = "0.1.0"
description = "Multigroup nodal expansion method solver for reactor core eigenvalue (k-effective) problems"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "nuclear",
    "reactor physics",
    "nodal expansion method",
    "neutron diffusion",
    "k-effective",
    "eigenvalue",
]
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
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
nemsolve = "nemsolve.cli:main"

[tool.setuptools.packages.find]
include = ["nemsolve*"]

[tool.pytest.ini_options]
addopts = "-ra"
