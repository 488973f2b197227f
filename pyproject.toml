[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "agbkit"
version = "0.1.0"
description = "Tile, palette, PNG and compression helpers plus a dependency scanner for Game Boy Advance builds"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "gba",
    "game-boy-advance",
    "tiles",
    "palette",
    "lz77",
    "huffman",
    "run-length",
    "png",
    "dependencies",
    "build",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: System :: Archiving :: Compression",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
scaninc = "agbkit.scaninc.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["agbkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
