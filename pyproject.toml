[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hraudiowizard"
version = "1.0.0"
description = "High-frequency compensation for band-limited stereo audio: upsampling and harmonic overtone synthesis"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "audio",
    "dsp",
    "stft",
    "resampling",
    "high-frequency-compensation",
    "mid-side",
    "wav",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
hraudiowizard = "hraudiowizard.app:main"

[tool.hatch.build.targets.wheel]
packages = ["hraudiowizard"]

[tool.hatch.build.targets.sdist]
include = [
    "hraudiowizard",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
