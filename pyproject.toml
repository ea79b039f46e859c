[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hivekit"
version = "0.1.0"
description = "Memory archive builder, initrd reader, ELF64 loader and amd64 page-table model for a small kernel"
requires-python = ">=3.10"
dependencies = []
keywords = ["initrd", "archive", "elf", "page-tables", "kernel", "memar"]
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
    "Topic :: System :: Archiving :: Packaging",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
memar = "hivekit.memar:main"

[tool.hatch.build.targets.wheel]
packages = ["hivekit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
