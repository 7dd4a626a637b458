[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "banqi"
version = "0.1.0"
description = "Chinese Dark Chess (Banqi) rules, move generation, alpha-beta engine and a line-based referee"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["banqi", "dark chess", "xiangqi", "board game", "alpha-beta", "bitboard"]
classifiers = [
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
banqi-referee = "banqi.referee:main"

[tool.setuptools.packages.find]
include = ["banqi*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
