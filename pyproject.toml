[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dockerstep"
version = "0.1.0"
description = "Apply Dockerfile instructions to an image configuration, step by step."
requires-python = ">=3.10"
dependencies = []
keywords = ["dockerfile", "container", "image", "build", "oci"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dockerstep"]

[tool.pytest.ini_options]
addopts = "-ra"
