[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "auctionsvc"
version = "0.1.0"
description = "HTTP auction service with batched bidding and automatic auction expiry, backed by MongoDB"
requires-python = ">=3.10"
keywords = ["auction", "bids", "mongodb", "flask", "rest", "http"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "pymongo>=4.0",
    "flask>=2.2",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
auctionsvc = "auctionsvc.app:main"

[tool.hatch.build.targets.wheel]
packages = ["auctionsvc"]

[tool.hatch.build.targets.sdist]
include = ["auctionsvc", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
