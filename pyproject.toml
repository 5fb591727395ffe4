[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zeitgeist"
version = "0.1.0"
description = "Look up the latest available version of a dependency in its upstream source"
requires-python = ">=3.10"
keywords = ["dependencies", "versions", "upstream", "semver", "helm", "gitlab", "github", "ami", "eks"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Quality Assurance",
]
dependencies = [
    "requests",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
    "pyyaml",
]

[tool.hatch.build.targets.wheel]
packages = ["zeitgeist"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
