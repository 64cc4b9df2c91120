[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "topolvm"
version = "0.1.0"
description = "LogicalVolume resources, legacy API group handling, access logging and configuration for an LVM-backed CSI storage plugin"
requires-python = ">=3.10"
keywords = ["lvm", "csi", "kubernetes", "storage", "logical-volume"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["topolvm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
