[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pamdsp"
version = "0.1.0"
description = "Audio processing building blocks: cascaded biquads, real FFT, windows, high-pass filter and spectral noise suppression"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["audio", "dsp", "noise suppression", "high-pass filter", "biquad", "fft"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["pamdsp"]

[tool.pytest.ini_options]
addopts = "-ra"
