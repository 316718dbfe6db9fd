[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ensembl-post"
version = "0.6.0"
description = "Batched asynchronous access to the POST endpoints of the Ensembl REST API"
requires-python = ">=3.10"
keywords = ["ensembl", "vep", "genomics", "bioinformatics", "rest", "asyncio"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Framework :: AsyncIO",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]
dependencies = [
    "httpx>=0.24",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
    "pytest-asyncio>=0.21",
    "respx>=0.20",
]

[project.scripts]
ensembl-post = "ensembl_post.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["ensembl_post"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
