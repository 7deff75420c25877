[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "ropepull"
version = "0.1.0"
description = "Game logic for a two-player rope-pulling timing game, with scene, chunk and PNG utilities"
requires-python = ">=3.10"
keywords = ["game", "scene", "tug-of-war", "chunk", "png", "orbit-camera"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "numpy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.setuptools]
packages = ["ropepull"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
