[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "teakdsp"
version = "0.1.0"
description = "Peripheral models for a TeakLite DSP emulator: AHBM, APBP, ICU, BTDMP, shared memory, operand fields, test-case records and a COFF reader"
requires-python = ">=3.10"
dependencies = []
keywords = ["emulator", "dsp", "teak", "teaklite", "coff", "peripherals"]
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
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["teakdsp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
