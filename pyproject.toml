[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lxpbridge"
version = "0.1.0"
description = "Frame codec, input register decoding and MQTT message mapping for LuxPower inverter datalogs"
requires-python = ">=3.10"
dependencies = []
keywords = ["luxpower", "inverter", "solar", "mqtt", "modbus", "datalog"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest", "freezegun"]

[tool.hatch.build.targets.wheel]
packages = ["lxpbridge"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
