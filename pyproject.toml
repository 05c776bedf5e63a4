[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "qlab"
version = "0.1.0"
description = "Checked string queue with allocation tracking, a small command interpreter, levelled reporting and a hint-balanced search tree"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "queue",
    "linked list",
    "test harness",
    "allocation checking",
    "command interpreter",
    "self-balancing tree",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: Software Development :: Testing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
qlab-stree = "qlab.stree:main"

[tool.hatch.build.targets.wheel]
packages = ["qlab"]

[tool.pytest.ini_options]
addopts = "-ra"
